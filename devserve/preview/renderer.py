import html
from pathlib import PurePosixPath
from typing import Optional
from dataclasses import dataclass
import markdown

@dataclass
class RenderConfig:
    extensions: tuple = ("extra", "sane_lists")
    encoding: str = "utf-8"

class MarkdownRenderer:
    """Turns Markdown source into a standalone HTML document"""

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or RenderConfig()

    def render(self, source: str) -> str:
        """Render Markdown to an HTML fragment"""
        return markdown.markdown(source, extensions=list(self.config.extensions))

    def render_document(self, source: str, title: str = "") -> str:
        """Render Markdown and wrap it in a page with a <head>"""
        return (
            "<!DOCTYPE html>\n"
            "<html>\n"
            "<head>\n"
            f'<meta charset="{self.config.encoding}">\n'
            f"<title>{html.escape(title)}</title>\n"
            "</head>\n"
            "<body>\n"
            f"{self.render(source)}\n"
            "</body>\n"
            "</html>\n"
        )

    def render_bytes(self, body: bytes, path: str = "") -> bytes:
        """Render an encoded Markdown file body to an encoded HTML page"""
        source = body.decode(self.config.encoding, errors="replace")
        title = PurePosixPath(path).stem
        return self.render_document(source, title).encode(self.config.encoding)
