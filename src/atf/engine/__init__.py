"""Driver plugin registry."""

from atf.engine.web import PlaywrightDriver

DRIVER_REGISTRY: dict[str, type] = {
    "web": PlaywrightDriver,
}
