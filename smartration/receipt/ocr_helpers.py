"""Pure OCR transformation helpers for receipt parsing.

Turns Vision-style text annotations into ordered, cleaned receipt lines:
annotations -> tokens (text + geometric center) -> line buckets -> strings.
"""

import io
import re
from collections.abc import Sequence
from typing import Any

from smartration.runtime.logging import get_logger

logger = get_logger(__name__)

MAX_IMAGE_DIMENSION = 3000  # Resize if either dimension exceeds this
LINE_Y_TOLERANCE = 10.0  # Max vertical distance (pixels) between tokens on one line

# Punctuation kept on reconstructed lines; everything else non-alphanumeric is dropped.
ALLOWED_LINE_PUNCTUATION = frozenset(".$-/@*+")

Annotation = dict[str, Any]
Token = dict[str, Any]


def resize_image_bytes(image_bytes: bytes, max_dimension: int = MAX_IMAGE_DIMENSION) -> bytes:
    """
    Resize image bytes if it exceeds max_dimension on either side.

    Args:
        image_bytes: Image data as bytes
        max_dimension: Maximum allowed dimension (width or height)

    Returns:
        Image bytes (JPEG format), resized if necessary
    """
    from PIL import Image, ImageOps

    img = Image.open(io.BytesIO(image_bytes))

    # Apply EXIF orientation so OCR sees the receipt upright
    img = ImageOps.exif_transpose(img)

    width, height = img.size
    if width > max_dimension or height > max_dimension:
        if width > height:
            new_width = max_dimension
            new_height = int(height * (max_dimension / width))
        else:
            new_height = max_dimension
            new_width = int(width * (max_dimension / height))
        img = img.resize((new_width, new_height), Image.Resampling.LANCZOS)

    buffer = io.BytesIO()
    img.convert("RGB").save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _annotation_text(annotation: Annotation) -> str:
    text = annotation.get("text")
    if text is None:
        text = annotation.get("description")
    return text if isinstance(text, str) else ""


def _is_full_text_annotation(annotation: Annotation) -> bool:
    """Return True if the annotation is the whole-image text block of a Vision response."""
    # Per-fragment annotations never span lines; the full-text block always does.
    return "locale" in annotation or "\n" in _annotation_text(annotation)


def split_full_text_annotation(annotations: Sequence[Annotation]) -> list[Annotation]:
    """
    Drop the leading full-text annotation of a Vision TEXT_DETECTION response.

    The first element of such a response repeats every detected word as one
    block. Lists that contain only per-fragment annotations are returned as-is.
    """
    if not annotations:
        return []
    first = annotations[0]
    if isinstance(first, dict) and _is_full_text_annotation(first):
        return list(annotations[1:])
    return list(annotations)


def _vertex_coordinates(annotation: Annotation) -> tuple[list[float], list[float]] | None:
    """Return (xs, ys) for the four bounding vertices, or None if geometry is unusable."""
    bounding_poly = annotation.get("boundingPoly") or annotation.get("bounding_poly")
    if not isinstance(bounding_poly, dict):
        return None
    vertices = bounding_poly.get("vertices")
    if not isinstance(vertices, (list, tuple)) or len(vertices) < 4:
        return None

    xs: list[float] = []
    ys: list[float] = []
    for vertex in vertices[:4]:
        if not isinstance(vertex, dict):
            return None
        # Vision omits zero-valued coordinates from its JSON output.
        x = vertex.get("x", 0)
        y = vertex.get("y", 0)
        if isinstance(x, bool) or isinstance(y, bool):
            return None
        if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            return None
        xs.append(float(x))
        ys.append(float(y))
    return xs, ys


def normalize_annotation(annotation: Annotation) -> Token | None:
    """
    Convert one raw OCR annotation into a position-bearing token.

    Returns None (the annotation is skipped) when the text is blank or the
    bounding polygon is missing or malformed.
    """
    text = _annotation_text(annotation).strip()
    if not text:
        return None

    coordinates = _vertex_coordinates(annotation)
    if coordinates is None:
        logger.debug("Skipping annotation %r without usable bounding box", text)
        return None

    xs, ys = coordinates
    return {
        "text": text,
        "center_x": sum(xs) / len(xs),
        "center_y": sum(ys) / len(ys),
        "width": max(xs) - min(xs),
    }


def extract_tokens(annotations: Sequence[Annotation]) -> list[Token]:
    """Normalize an OCR response into tokens, dropping the full-text block and malformed entries."""
    tokens: list[Token] = []
    for annotation in split_full_text_annotation(annotations):
        if not isinstance(annotation, dict):
            continue
        token = normalize_annotation(annotation)
        if token is not None:
            tokens.append(token)
    return tokens


def group_tokens_into_lines(tokens: Sequence[Token], tolerance: float = LINE_Y_TOLERANCE) -> list[list[Token]]:
    """
    Group tokens into visual lines by vertical proximity.

    Tokens are taken in input order. Each joins the first existing line whose
    members all lie within `tolerance` of it vertically; otherwise it starts a
    new line. Lines are never merged or split afterwards.

    Returns lines top-to-bottom (by average vertical center), each line's
    tokens left-to-right.
    """
    buckets: list[dict[str, Any]] = []

    for token in tokens:
        y = token["center_y"]
        for bucket in buckets:
            if max(bucket["y_max"], y) - min(bucket["y_min"], y) <= tolerance:
                bucket["tokens"].append(token)
                bucket["y_min"] = min(bucket["y_min"], y)
                bucket["y_max"] = max(bucket["y_max"], y)
                break
        else:
            buckets.append({"y_min": y, "y_max": y, "tokens": [token]})

    lines = [bucket["tokens"] for bucket in buckets]
    for line in lines:
        line.sort(key=lambda t: t["center_x"])
    lines.sort(key=_line_center_y)
    return lines


def _line_center_y(line: list[Token]) -> float:
    """Return average center Y for a grouped line."""
    return sum(t["center_y"] for t in line) / len(line)


def _has_letter(words: Sequence[str]) -> bool:
    return any(ch.isalpha() for word in words for ch in word)


def collapse_repeated_words(text: str) -> str:
    """
    Collapse immediately repeated words and two-word phrases.

    OCR sometimes reports the same fragment twice ("Whole Whole Milk Milk").
    Comparison is case-insensitive and only fragments containing a letter are
    collapsed, so repeated numbers such as "1.00 1.00" are kept.
    """
    out: list[str] = []
    for word in text.split():
        if out and out[-1].lower() == word.lower() and _has_letter([word]):
            continue
        out.append(word)
        if len(out) >= 4:
            last_pair = [w.lower() for w in out[-2:]]
            if last_pair == [w.lower() for w in out[-4:-2]] and _has_letter(last_pair):
                del out[-2:]
    return " ".join(out)


def clean_line_text(text: str, collapse_repeats: bool = True) -> str:
    """Filter disallowed characters, squeeze whitespace and collapse OCR repeats."""
    filtered = "".join(ch for ch in text if ch.isalnum() or ch.isspace() or ch in ALLOWED_LINE_PUNCTUATION)
    filtered = re.sub(r"\s+", " ", filtered).strip()
    if collapse_repeats:
        filtered = collapse_repeated_words(filtered)
    return filtered


def reconstruct_lines(
    tokens: Sequence[Token],
    tolerance: float = LINE_Y_TOLERANCE,
    collapse_repeats: bool = True,
) -> list[str]:
    """
    Rebuild receipt text lines from tokens in reading order.

    Returns cleaned, non-empty line strings; an empty token list gives [].
    """
    result: list[str] = []
    for line in group_tokens_into_lines(tokens, tolerance):
        text = clean_line_text(" ".join(t["text"] for t in line), collapse_repeats=collapse_repeats)
        if text:
            result.append(text)
    return result
