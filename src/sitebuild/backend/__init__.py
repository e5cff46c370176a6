from .server import DevServer, ReloadChannel, create_app, inject_livereload

__all__ = ["DevServer", "ReloadChannel", "create_app", "inject_livereload"]
