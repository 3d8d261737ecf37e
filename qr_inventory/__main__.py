"""Run the service with uvicorn: ``python -m qr_inventory``."""
import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run("qr_inventory.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
