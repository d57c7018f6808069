"""
Allow-list sanitizer for generated infographic fragments.

The visualHtml field comes from an external model and is inserted into
the page as markup, so it is reduced to layout and text elements styled
with utility classes. Anything outside the allow-list is unwrapped
(children kept) or, for active content, removed together with its
children.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Comment, Tag


ALLOWED_TAGS = frozenset(
    {
        "div", "span", "p", "br", "hr",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "strong", "b", "em", "i", "u", "small", "mark", "sub", "sup", "code",
        "ul", "ol", "li", "dl", "dt", "dd",
        "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
        "section", "figure", "figcaption", "header", "footer",
        "svg", "g", "path", "line", "polyline", "polygon", "rect", "circle", "ellipse", "text", "tspan",
    }
)

# Dropped with everything inside them.
REMOVED_TAGS = frozenset(
    {
        "script", "style", "iframe", "frame", "frameset", "object", "embed", "applet",
        "form", "input", "button", "select", "textarea", "link", "meta", "base",
        "template", "noscript", "foreignobject",
    }
)

ALLOWED_ATTRIBUTES = frozenset(
    {
        "class", "title", "role", "colspan", "rowspan",
        "viewbox", "width", "height", "x", "y", "x1", "y1", "x2", "y2",
        "cx", "cy", "r", "rx", "ry", "d", "points", "fill", "stroke",
        "stroke-width", "stroke-linecap", "stroke-linejoin", "transform",
        "text-anchor", "xmlns",
    }
)


def sanitize_visual_html(fragment: str) -> str:
    """Return ``fragment`` reduced to allow-listed tags and attributes."""
    if not fragment:
        return ""
    soup = BeautifulSoup(fragment, "html.parser")

    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        name = tag.name.lower()
        if name in REMOVED_TAGS:
            tag.decompose()
        elif name not in ALLOWED_TAGS:
            tag.unwrap()
        else:
            _clean_attributes(tag)

    return str(soup).strip()


def _clean_attributes(tag: Tag) -> None:
    for attr in list(tag.attrs):
        key = attr.lower()
        value = tag.attrs[attr]
        text = " ".join(value) if isinstance(value, list) else str(value)
        if key.startswith("aria-"):
            continue
        if key not in ALLOWED_ATTRIBUTES or "javascript:" in text.lower().replace(" ", ""):
            del tag.attrs[attr]
