from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

APP_TITLE = "TSW IO"
ERROR_COLOR = "#ef4444"

SPLASH_HTML = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  html, body { margin: 0; height: 100%; overflow: hidden; }
  body {
    display: flex; flex-direction: column; align-items: center; justify-content: center;
    background: #111827; color: #e5e7eb;
    font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
  }
  h1 { font-size: 28px; font-weight: 600; margin: 0 0 18px; letter-spacing: 1px; }
  .spinner {
    width: 32px; height: 32px; margin-bottom: 18px;
    border: 3px solid #374151; border-top-color: #60a5fa; border-radius: 50%;
    animation: spin 0.9s linear infinite;
  }
  #status { font-size: 13px; color: #9ca3af; }
  @keyframes spin { to { transform: rotate(360deg); } }
</style>
</head>
<body>
  <h1>TSW IO</h1>
  <div class="spinner"></div>
  <div id="status">Starting...</div>
</body>
</html>
"""


class PresentationLayer(Protocol):
    def create_view(
        self,
        view_id: str,
        *,
        title: str,
        url: Optional[str] = None,
        html: Optional[str] = None,
        size: Tuple[int, int] = (800, 600),
        min_size: Optional[Tuple[int, int]] = None,
        resizable: bool = True,
        decorations: bool = True,
        hidden: bool = False,
    ) -> Any:
        ...

    def update_status_text(self, view: Any, text: str, error: bool = False) -> bool:
        """Push text into the view's status element. Must never raise."""
        ...

    def show_view(self, view: Any) -> None:
        ...

    def close_view(self, view: Any) -> None:
        ...

    def on_closed(self, view: Any, callback: Callable[[], None]) -> None:
        ...


def status_script(text: str, error: bool = False) -> str:
    script = f"document.getElementById('status').textContent = {json.dumps(text)};"
    if error:
        script += f"document.getElementById('status').style.color = {json.dumps(ERROR_COLOR)};"
    return script


class WebviewPresentation:
    """PresentationLayer backed by pywebview windows."""

    def __init__(self, webview_module: Any = None):
        if webview_module is None:
            import webview as webview_module
        self.webview = webview_module
        self.views: Dict[str, Any] = {}

    def create_view(
        self,
        view_id: str,
        *,
        title: str,
        url: Optional[str] = None,
        html: Optional[str] = None,
        size: Tuple[int, int] = (800, 600),
        min_size: Optional[Tuple[int, int]] = None,
        resizable: bool = True,
        decorations: bool = True,
        hidden: bool = False,
    ) -> Any:
        kwargs: Dict[str, Any] = {
            "width": size[0],
            "height": size[1],
            "resizable": resizable,
            "frameless": not decorations,
            "hidden": hidden,
        }
        if min_size is not None:
            kwargs["min_size"] = min_size
        if html is not None:
            kwargs["html"] = html
        window = self.webview.create_window(title, url, **kwargs)
        self.views[view_id] = window
        return window

    def update_status_text(self, view: Any, text: str, error: bool = False) -> bool:
        if view is None:
            return False
        try:
            view.evaluate_js(status_script(text, error=error))
        except Exception as e:
            logger.debug("Could not update splash status: %s", e)
            return False
        return True

    def show_view(self, view: Any) -> None:
        view.show()

    def close_view(self, view: Any) -> None:
        view.destroy()
        for key, window in list(self.views.items()):
            if window is view:
                del self.views[key]

    def on_closed(self, view: Any, callback: Callable[[], None]) -> None:
        view.events.closed += callback

    def start(self, func: Optional[Callable[[], Any]] = None) -> None:
        """Run the GUI loop on the calling thread; `func` runs on a helper thread."""
        if func is None:
            self.webview.start(debug=False)
        else:
            self.webview.start(func, debug=False)
