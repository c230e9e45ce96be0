"""repotune HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that starts and stops playback sessions and exposes the
activity display and live visuals to a renderer.

Usage
-----
Create and run the application::

    from repotune.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # session control and presentation

"""

from repotune.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
