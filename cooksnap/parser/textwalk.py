"""
Tier 4: Text-walk extraction from pages built out of generic containers.

Client-rendered pages often carry no structured data, no microdata, and no
meaningful class names; headings are styled divs and ingredients are rows of
spans. This tier finds the "Ingredients" and "Instructions" headings by their
text and collects leaf text that follows them, with a checkbox-row fallback for
shopping-list style ingredient widgets.
"""

import logging
import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from cooksnap.models import ExtractedRecipe
from cooksnap.parser.instructions import split_numbered_steps, strip_step_marker
from cooksnap.parser.normalize import clean_text, normalize_duration
from cooksnap.parser.sections import as_section_header
from cooksnap.parser.vocabulary import (
    COOKING_VERBS,
    INGREDIENT_HEADING_RE,
    INSTRUCTION_HEADING_RE,
    STOP_SECTION_RE,
    UI_NOISE,
    UI_NOISE_PREFIX_RE,
    UNIT_PATTERN,
)

logger = logging.getLogger(__name__)

MAX_HEADING_TEXT = 50
MIN_INGREDIENT_LENGTH = 3
MAX_INGREDIENT_LENGTH = 150
MIN_INSTRUCTION_LENGTH = 10
MAX_INSTRUCTION_LENGTH = 1000
MIN_LINES = 2
MAX_SHARED_ITEM_LENGTH = 25
MAX_ROW_CLIMB = 3

_SKIP_TAGS = frozenset(
    {
        "script",
        "style",
        "noscript",
        "template",
        "svg",
        "button",
        "input",
        "select",
        "textarea",
        "iframe",
        "nav",
    }
)
_BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "li",
        "main",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "tbody",
        "td",
        "tr",
        "ul",
    }
)
_NATIVE_HEADING_RE = re.compile(r"^h([1-6])$")
_HEADING_CLASS_RE = re.compile(
    r"(?:^|[-_])(?:h([1-6])|heading|headline|title)(?:$|[-_\d])", re.IGNORECASE
)
_LARGE_TEXT_CLASS_RE = re.compile(r"^(?:[a-z]+:)?text-(lg|xl|[2-9]xl)$")
_DIVIDER_CLASS_RE = re.compile(r"divider|separator|spacer|border-[tb]\b", re.IGNORECASE)
_HIDDEN_CLASS_RE = re.compile(
    r"^(?:hidden|sr-only|visually-hidden|screen-reader-text|invisible)$"
)
_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden")

_SHARED_QUANTITY_RE = re.compile(
    rf"^(?P<qty>\d+(?:[./]\d+)?(?:\s+\d+/\d+)?)\s*(?P<unit>(?:{UNIT_PATTERN})\.?)\s+(?P<tail>.+)$",
    re.IGNORECASE,
)
_EACH_RE = re.compile(r"\(?\beach\b\)?\s*:?", re.IGNORECASE)

_IMAGE_REJECT_RE = re.compile(
    r"logo|icon|avatar|sprite|pixel|spinner|placeholder|badge|emoji|gravatar|blank\.gif",
    re.IGNORECASE,
)
_AD_HOST_RE = re.compile(
    r"doubleclick|googlesyndication|googleadservices|facebook\.com|analytics|adsystem|scorecardresearch",
    re.IGNORECASE,
)
MIN_IMAGE_SIZE = 200

PREP_TIME_LABEL_RE = re.compile(r"^\s*prep(?:aration)?(?:\s+time\b|\s*:)", re.IGNORECASE)
COOK_TIME_LABEL_RE = re.compile(r"^\s*cook(?:ing)?(?:\s+time\b|\s*:)", re.IGNORECASE)
TOTAL_TIME_LABEL_RE = re.compile(r"^\s*total(?:\s+time\b|\s*:)", re.IGNORECASE)
_TIME_VALUE_RE = re.compile(
    r"(?<![\d.])\d+(?:\.\d+)?\s*(?:hours?|hrs?|h|minutes?|mins?|m)\b"
    r"(?:\s*\d+\s*(?:minutes?|mins?|m)\b)?",
    re.IGNORECASE,
)
MAX_TIME_TEXT = 40


def extract_text_walk(soup: BeautifulSoup, url: str) -> ExtractedRecipe | None:
    """Try to extract a recipe from heading text and the leaf text around it."""
    ingredient_heading, instruction_heading = find_section_headings(soup)

    ingredients = []
    for source in _INGREDIENT_SOURCES:
        ingredients = source(soup, ingredient_heading)
        if ingredients:
            break

    steps = []
    if instruction_heading is not None:
        steps = filter_instruction_lines(collect_section_lines(instruction_heading))

    logger.debug(
        "Text walk found %d ingredients, %d steps", len(ingredients), len(steps)
    )
    if len(ingredients) < MIN_LINES and len(steps) < MIN_LINES:
        return None

    return ExtractedRecipe(
        title=extract_page_title(soup, url),
        source_url=url,
        image=extract_page_image(soup, url),
        ingredients=ingredients,
        instructions=steps,
        prep_time=extract_labeled_duration(soup, PREP_TIME_LABEL_RE),
        cook_time=extract_labeled_duration(soup, COOK_TIME_LABEL_RE),
        total_time=extract_labeled_duration(soup, TOTAL_TIME_LABEL_RE),
    )


# -- Headings --


def heading_level(tag: Tag) -> int | None:
    """Heading level from the tag name, ARIA role, or a heading-style class."""
    native = _NATIVE_HEADING_RE.match(tag.name or "")
    if native:
        return int(native.group(1))

    if tag.get("role") == "heading":
        level = str(tag.get("aria-level", "2"))
        return int(level) if level.isdigit() else 2

    for cls in tag.get("class", []):
        match = _HEADING_CLASS_RE.search(cls)
        if match:
            return int(match.group(1)) if match.group(1) else 3
        size = _LARGE_TEXT_CLASS_RE.match(cls)
        if size:
            return 3 if size.group(1) in ("lg", "xl") else 2
    return None


def is_heading(tag: Tag) -> bool:
    return heading_level(tag) is not None


def _ends_section(tag: Tag) -> bool:
    """
    Whether a heading closes the section being walked.

    Text styled only text-lg or text-xl is often an ingredient row rather than
    a heading, so it only counts when something else marks it as one.
    """
    if not is_heading(tag):
        return False
    if _NATIVE_HEADING_RE.match(tag.name or "") or tag.get("role") == "heading":
        return True
    for cls in tag.get("class", []):
        if _HEADING_CLASS_RE.search(cls):
            return True
        size = _LARGE_TEXT_CLASS_RE.match(cls)
        if size and size.group(1) not in ("lg", "xl"):
            return True
    return False


def _direct_text(tag: Tag) -> str:
    return clean_text(
        " ".join(
            str(child)
            for child in tag.children
            if isinstance(child, NavigableString) and not isinstance(child, Comment)
        )
    )


def _heading_text(tag: Tag) -> str:
    """Own text of a heading, reaching into wrapper spans when it has none."""
    return _direct_text(tag) or clean_text(tag.get_text(" "))


def find_section_headings(soup: BeautifulSoup) -> tuple[Tag | None, Tag | None]:
    """Single pass for the first ingredient heading and first instruction heading."""
    ingredient_heading = None
    instruction_heading = None
    for tag in soup.find_all(True):
        if ingredient_heading is not None and instruction_heading is not None:
            break
        if tag.name in _SKIP_TAGS or not is_heading(tag):
            continue
        text = _heading_text(tag)
        if not text or len(text) >= MAX_HEADING_TEXT:
            continue
        if ingredient_heading is None and INGREDIENT_HEADING_RE.match(text):
            ingredient_heading = tag
        elif instruction_heading is None and INSTRUCTION_HEADING_RE.match(text):
            instruction_heading = tag
    return ingredient_heading, instruction_heading


def _is_section_label(text: str) -> bool:
    return bool(
        text
        and len(text) < MAX_HEADING_TEXT
        and (
            INGREDIENT_HEADING_RE.match(text)
            or INSTRUCTION_HEADING_RE.match(text)
            or STOP_SECTION_RE.match(text)
        )
    )


# -- Leaf-text walk --


def _is_hidden(tag: Tag) -> bool:
    if tag.has_attr("hidden") or tag.get("aria-hidden") == "true":
        return True
    if _HIDDEN_STYLE_RE.search(tag.get("style", "")):
        return True
    return any(_HIDDEN_CLASS_RE.match(cls) for cls in tag.get("class", []))


def _has_block_children(tag: Tag) -> bool:
    return any(isinstance(child, Tag) and child.name in _BLOCK_TAGS for child in tag.children)


class _LeafCollector:
    """Gathers leaf text in document order until a section boundary is reached."""

    def __init__(self):
        self.lines: list[str] = []
        self.stopped = False

    def visit(self, node) -> None:
        if self.stopped:
            return
        if isinstance(node, NavigableString):
            if not isinstance(node, Comment):
                text = clean_text(str(node))
                if text:
                    self.lines.append(text)
            return
        if not isinstance(node, Tag) or node.name in _SKIP_TAGS or _is_hidden(node):
            return

        if _ends_section(node):
            self.stopped = True
            return

        if _has_block_children(node):
            if _is_section_label(_direct_text(node)):
                self.stopped = True
                return
            for child in node.children:
                self.visit(child)
                if self.stopped:
                    return
            return

        text = clean_text(node.get_text(" "))
        if _is_section_label(text):
            self.stopped = True
            return
        if text:
            self.lines.append(text)


def _walk_siblings(start: Tag) -> list[str]:
    collector = _LeafCollector()
    for sibling in start.next_siblings:
        collector.visit(sibling)
        if collector.stopped:
            break
    return collector.lines


def collect_section_lines(heading: Tag, max_depth: int = 3) -> list[str]:
    """
    Collect leaf text after a section heading.

    Walks the heading's following siblings; when that yields nothing (the
    heading sits alone inside a wrapper), retries from the wrapper's position
    in its own parent, a few levels up at most.
    """
    node = heading
    for _ in range(max_depth):
        lines = _walk_siblings(node)
        if lines:
            return lines
        parent = node.parent
        if not isinstance(parent, Tag) or parent.name in ("body", "html", "[document]"):
            break
        node = parent
    return []


# -- Checkbox rows --


def _is_checkbox(tag) -> bool:
    return isinstance(tag, Tag) and tag.name == "input" and tag.get("type") == "checkbox"


def _is_divider(tag: Tag) -> bool:
    if tag.name == "hr":
        return True
    if any(_DIVIDER_CLASS_RE.search(cls) for cls in tag.get("class", [])):
        return True
    return not tag.get_text(strip=True) and not tag.find("input")


def _is_heading_styled(tag: Tag) -> bool:
    if is_heading(tag):
        return True
    inner = tag.find(lambda t: isinstance(t, Tag) and is_heading(t))
    return inner is not None and len(clean_text(tag.get_text(" "))) < MAX_HEADING_TEXT


def _row_group_header(row: Tag) -> Tag | None:
    """Walk back over preceding rows and dividers to the nearest heading."""
    for sibling in row.previous_siblings:
        if not isinstance(sibling, Tag):
            continue
        if sibling.find(_is_checkbox) is not None:
            continue
        if _is_heading_styled(sibling):
            return sibling
        if _is_divider(sibling):
            continue
        return None
    return None


def _visible_strings(tag: Tag) -> list[str]:
    strings = []
    for string in tag.find_all(string=True):
        if isinstance(string, Comment):
            continue
        hidden = False
        for parent in string.parents:
            if parent is tag:
                break
            if parent.name in _SKIP_TAGS or _is_hidden(parent):
                hidden = True
                break
        if not hidden and string.strip():
            strings.append(string.strip())
    return strings


def _line_text(tag: Tag) -> str:
    """Join child texts with spaces so "<span>2 lbs</span><span>chicken</span>" reads right."""
    return clean_text(" ".join(_visible_strings(tag)))


def _row_lines(row: Tag) -> list[str]:
    """Visible text lines of a row, descending through single-child wrappers."""
    node = row
    while True:
        blocks = [
            child
            for child in node.children
            if isinstance(child, Tag)
            and child.name in _BLOCK_TAGS
            and not _is_hidden(child)
            and _line_text(child)
        ]
        if len(blocks) == 1:
            node = blocks[0]
            continue
        if not blocks:
            text = _line_text(node)
            return [text] if text else []
        return [_line_text(block) for block in blocks]


def _checkbox_row(checkbox: Tag) -> Tag | None:
    """The outermost element around a checkbox that holds no other checkbox."""
    row = checkbox.parent
    if not isinstance(row, Tag):
        return None
    for _ in range(MAX_ROW_CLIMB):
        parent = row.parent
        if not isinstance(parent, Tag) or parent.name in ("body", "html", "[document]"):
            break
        if len(parent.find_all(_is_checkbox, limit=2)) > 1:
            break
        row = parent
    return row


def expand_shared_quantity(line: str) -> list[str]:
    """
    Split "1 tsp each salt, pepper & paprika" into one line per item.

    A quantity+unit line is expanded when its tail says "each" or lists three
    or more short comma/ampersand separated items; every item gets the shared
    quantity and unit.
    """
    match = _SHARED_QUANTITY_RE.match(line)
    if not match:
        return [line]

    tail = match.group("tail")
    has_each = bool(re.search(r"\beach\b", tail, re.IGNORECASE))
    items = [
        part.strip(" .:")
        for part in re.split(r"\s*[,&]\s*", _EACH_RE.sub(" ", tail))
        if part.strip(" .:")
    ]
    if len(items) < 2:
        return [line]
    if not has_each and (
        len(items) < 3 or any(len(item) > MAX_SHARED_ITEM_LENGTH for item in items)
    ):
        return [line]

    prefix = f"{match.group('qty')} {match.group('unit')}"
    return [f"{prefix} {item}" for item in items]


def extract_checkbox_rows(soup: BeautifulSoup) -> list[str]:
    """Ingredient lines from checkbox + text rows, with group headers threaded in."""
    lines = []
    emitted_headers = set()
    for checkbox in soup.find_all(_is_checkbox):
        row = _checkbox_row(checkbox)
        if row is None or _is_hidden(row):
            continue
        row_lines = _row_lines(row)
        if not row_lines:
            continue

        header = _row_group_header(row)
        if header is not None and id(header) not in emitted_headers:
            emitted_headers.add(id(header))
            header_text = _line_text(header)
            if header_text and not INGREDIENT_HEADING_RE.match(header_text):
                lines.append(as_section_header(header_text))

        note = row_lines[1] if len(row_lines) > 1 else None
        for item in expand_shared_quantity(row_lines[0]):
            lines.append(f"{item}, {note}" if note else item)
    return lines



# -- Line filters --


def _is_ui_noise(line: str) -> bool:
    key = line.lower().strip(" .:!|•·")
    return key in UI_NOISE or bool(UI_NOISE_PREFIX_RE.match(line))


def _starts_with_cooking_verb(line: str) -> bool:
    first = re.split(r"[\s,.:;]+", line.strip(), maxsplit=1)[0].lower()
    return first in COOKING_VERBS


def _dedupe(lines: list[str]) -> list[str]:
    seen = set()
    unique = []
    for line in lines:
        key = line.lower()
        if key not in seen:
            seen.add(key)
            unique.append(line)
    return unique


def filter_ingredient_lines(lines: list[str]) -> list[str]:
    kept = []
    for line in lines:
        line = clean_text(line)
        if not MIN_INGREDIENT_LENGTH <= len(line) <= MAX_INGREDIENT_LENGTH:
            continue
        if _is_ui_noise(line) or _starts_with_cooking_verb(line):
            continue
        kept.append(line)
    return _dedupe(kept)


def filter_instruction_lines(lines: list[str]) -> list[str]:
    kept = []
    for line in lines:
        for step in split_numbered_steps(clean_text(line)):
            step = strip_step_marker(step)
            if not MIN_INSTRUCTION_LENGTH <= len(step) <= MAX_INSTRUCTION_LENGTH:
                continue
            if _is_ui_noise(step):
                continue
            kept.append(step)
    return _dedupe(kept)


def _ingredients_near_heading(soup: BeautifulSoup, heading: Tag | None) -> list[str]:
    if heading is None:
        return []
    return filter_ingredient_lines(collect_section_lines(heading))


def _ingredients_from_checkbox_rows(soup: BeautifulSoup, heading: Tag | None) -> list[str]:
    return filter_ingredient_lines(extract_checkbox_rows(soup))


_INGREDIENT_SOURCES = (_ingredients_near_heading, _ingredients_from_checkbox_rows)


# -- Title, image, times --


def _site_names(soup: BeautifulSoup, url: str) -> set[str]:
    names = set()
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    if host:
        names.add(host)
        names.add(host.split(".")[0])
    site = soup.find("meta", property="og:site_name")
    if site and site.get("content", "").strip():
        names.add(site["content"].strip().lower())
    return names


def _is_site_identity(text: str, site_names: set[str]) -> bool:
    squashed = re.sub(r"[^a-z0-9.]", "", text.lower())
    return any(squashed == re.sub(r"[^a-z0-9.]", "", name) for name in site_names)


def _is_title_styled(tag: Tag) -> bool:
    if heading_level(tag) == 1:
        return True
    for cls in tag.get("class", []):
        size = _LARGE_TEXT_CLASS_RE.match(cls)
        if size and size.group(1)[0].isdigit():
            return True
    return False


def extract_page_title(soup: BeautifulSoup, url: str) -> str:
    """
    Title from prominent heading text, falling back to <title>/og:title parts
    that are not just the site's own name.
    """
    site_names = _site_names(soup, url)

    for tag in soup.find_all(True):
        if tag.name in _SKIP_TAGS or tag.find_parent(["header", "nav", "footer"]):
            continue
        if not _is_title_styled(tag):
            continue
        text = clean_text(tag.get_text(" "))
        if 3 <= len(text) <= 120 and not _is_section_label(text) and not _is_site_identity(
            text, site_names
        ):
            return text

    candidates = []
    og = soup.find("meta", property="og:title")
    if og and og.get("content", "").strip():
        candidates.append(og["content"])
    title_tag = soup.find("title")
    if title_tag:
        candidates.append(title_tag.get_text())
    for candidate in candidates:
        for part in re.split(r"\s+[|–—-]\s+", clean_text(candidate)):
            if part and not _is_site_identity(part, site_names):
                return part

    return "Untitled Recipe"


def _image_source(img: Tag) -> str | None:
    for attr in ("src", "data-src", "data-lazy-src"):
        value = img.get(attr, "").strip()
        if value and not value.startswith("data:"):
            return value
    srcset = img.get("srcset", "").strip()
    if srcset:
        return srcset.split(",")[0].split()[0]
    return None


def _too_small(img: Tag) -> bool:
    for attr in ("width", "height"):
        value = str(img.get(attr, "")).strip().removesuffix("px")
        if value.isdigit() and int(value) < MIN_IMAGE_SIZE:
            return True
    return False


def extract_page_image(soup: BeautifulSoup, url: str) -> str | None:
    """og:image, else the first embedded image that is not a logo, icon, or tracker."""
    og = soup.find("meta", property="og:image")
    if og and og.get("content", "").strip():
        return urljoin(url, og["content"].strip())

    for img in soup.find_all("img"):
        src = _image_source(img)
        if not src or _too_small(img):
            continue
        absolute = urljoin(url, src)
        parsed = urlparse(absolute)
        if parsed.path.lower().endswith(".svg"):
            continue
        if _IMAGE_REJECT_RE.search(absolute) or _AD_HOST_RE.search(parsed.netloc):
            continue
        return absolute
    return None


def extract_labeled_duration(soup: BeautifulSoup, label_pattern: re.Pattern) -> str | None:
    """
    Read a duration that sits next to a short label such as "Prep Time".

    The value may follow the label in the same text ("Prep: 15 mins"), in the
    next sibling element, or in the label's parent.
    """
    for string in soup.find_all(string=label_pattern):
        label = clean_text(str(string))
        if not label or len(label) > MAX_TIME_TEXT or isinstance(string, Comment):
            continue
        parent = string.parent
        if not isinstance(parent, Tag) or parent.name in _SKIP_TAGS:
            continue

        candidates = [label]
        sibling = parent.find_next_sibling()
        if sibling is not None:
            candidates.append(clean_text(sibling.get_text(" ")))
        if isinstance(parent.parent, Tag):
            candidates.append(clean_text(parent.parent.get_text(" ")))

        for text in candidates:
            if not text or len(text) > MAX_TIME_TEXT:
                continue
            match = _TIME_VALUE_RE.search(text)
            if match:
                duration = normalize_duration(match.group())
                if duration:
                    return duration
    return None
