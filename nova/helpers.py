import inspect
import logging
import os
from html import escape
from typing import Any, Dict, Optional

from rich.console import Console

from .core.context import Context
from .core.exceptions import AppExitException
from .core.http import as_html
from .core.route import RouteObject
from .core.var_dump import VarDump


logger = logging.getLogger(__name__)

console = Console()

MIME_TYPES = {
    # text
    "txt": "text/plain",
    "htm": "text/html",
    "html": "text/html",
    "php": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "swf": "application/x-shockwave-flash",
    "flv": "video/x-flv",
    # images
    "png": "image/png",
    "jpe": "image/jpeg",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "ico": "image/vnd.microsoft.icon",
    "tiff": "image/tiff",
    "tif": "image/tiff",
    "svg": "image/svg+xml",
    "svgz": "image/svg+xml",
    # archives
    "zip": "application/zip",
    "rar": "application/x-rar-compressed",
    "exe": "application/x-msdownload",
    "msi": "application/x-msdownload",
    "cab": "application/vnd.ms-cab-compressed",
    # audio/video
    "mp3": "audio/mpeg",
    "qt": "video/quicktime",
    "mov": "video/quicktime",
    # adobe
    "pdf": "application/pdf",
    "psd": "image/vnd.adobe.photoshop",
    "ai": "application/postscript",
    "eps": "application/postscript",
    "ps": "application/postscript",
    # ms office
    "doc": "application/msword",
    "rtf": "application/rtf",
    "xls": "application/vnd.ms-excel",
    "ppt": "application/vnd.ms-powerpoint",
    # open office
    "odt": "application/vnd.oasis.opendocument.text",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",
    # fonts
    "woff2": "font/woff2",
    "ttf": "font/ttf",
}

DEFAULT_MIME_TYPE = "application/octet-stream"

DUMP_STYLES = """<style>
    .dump-container { text-align: left; margin: 20px; font-family: Consolas, Monaco, monospace; }
    .dump-container pre {
        display: block; padding: 15px; margin: 0 0 10px; font-size: 13px;
        line-height: 1.42857143; color: #333; word-break: break-all; word-wrap: break-word;
        background-color: #f8f8f8; border: 1px solid #eee; border-radius: 4px;
        box-shadow: 0 1px 3px rgba(0,0,0,0.1);
    }
    .dump-container .file-info {
        color: #666; font-size: 12px; margin-bottom: 5px; padding: 5px;
        background: #f1f1f1; border-radius: 3px;
    }
    .dump-container .var-content { margin: 10px 0; padding: 5px; }
    .dump-container .var-separator { border-top: 1px dashed #ddd; margin: 10px 0; }
</style>"""


def runtime(msg: str) -> float:
    """Log how long the current request has been running, in milliseconds."""
    elapsed = Context.instance().calc_app_time() * 1000
    logger.info(f"{msg} run in {elapsed} ms")
    return elapsed


def route(module: str = "", controller: str = "", action: str = "", params: Optional[Dict[str, Any]] = None) -> RouteObject:
    return RouteObject(module, controller, action, dict(params or {}))


def file_type(filename: str) -> str:
    extension = os.path.splitext(filename)[1].lstrip(".").lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def config(key: Optional[str] = None, value: Any = None) -> Any:
    """Read or write the active configuration.

    With ``key`` and ``value`` the value is stored and returned, with only
    ``key`` it is read, and with neither the whole tree is returned.
    """
    cfg = Context.instance().config()
    if key is not None and value is not None:
        cfg.set(key, value)
        return value
    if key:
        return cfg.get(key)
    return cfg.all()


def is_cli() -> bool:
    ctx = Context.current()
    return ctx is None or not ctx.request().is_web


def dump(*args: Any) -> None:
    """Show values while debugging.

    On the command line the values are printed. In a web request the
    rendered values replace the response and request handling stops.
    """
    if not Context.instance().is_debug():
        return

    caller = inspect.stack()[1]
    location = f"{caller.filename}:{caller.lineno}"

    if is_cli():
        console.print()
        console.rule(style="yellow")
        console.print(location, style="cyan", markup=False, highlight=False, soft_wrap=True)
        for arg in args:
            console.print(VarDump(html_output=False).dump_type(arg), markup=False, highlight=False, soft_wrap=True)
        console.rule(style="yellow")
        console.print()
        return

    parts = [DUMP_STYLES, '<div class="dump-container"><pre>']
    parts.append(f'<div class="file-info">{escape(location)}</div>')
    for index, arg in enumerate(args):
        if index > 0:
            parts.append('<div class="var-separator"></div>')
        parts.append(f'<div class="var-content">{VarDump(html_output=True).dump_type(arg)}</div>')
    parts.append("</pre></div>")

    raise AppExitException(as_html("".join(parts)), "Dump variables")
