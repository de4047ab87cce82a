from fastapi import APIRouter

SECRET_KEYS = ("API_KEY",)


def create_systems_router(container_env: dict):
    """Create systems router with access to container environment config."""
    router = APIRouter(prefix="/systems", tags=["System"])

    @router.get("/health")
    def health():
        return {"status": "ok"}

    @router.get("/config")
    def get_config():
        """Return startup configuration values with secrets masked."""
        environment = {}
        for key, value in container_env.items():
            if value is None:
                environment[key] = None
            elif key in SECRET_KEYS:
                environment[key] = "***"
            else:
                environment[key] = str(value)
        return {"environment": environment}

    return router
