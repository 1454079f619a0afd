"""python-pptx implementation of the slide collaborator.

Covers title discovery, chart placeholder lookup, image placement and the
"View in Grafana" link under each chart.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Protocol, Tuple

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE, MSO_SHAPE_TYPE
from pptx.enum.text import PP_ALIGN
from pptx.util import Pt

from .errors import ChartRenderError
from .models import ChartImage

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "ImagePlaceholder"
MAX_TITLE_LENGTH = 200
LINK_LABEL = "🔗 View in Grafana Dashboard"
LINK_COLOR = RGBColor(0x1A, 0x73, 0xE8)


@dataclass(frozen=True)
class Region:
    """Shape bounds in EMU."""

    left: int
    top: int
    width: int
    height: int


DEFAULT_REGION = Region(left=Pt(50), top=Pt(150), width=Pt(600), height=Pt(400))


def extract_slide_title(texts: Iterable[str]) -> Optional[str]:
    """First non-empty text shorter than 200 characters, in shape order."""
    for raw in texts:
        text = (raw or "").strip()
        if 0 < len(text) < MAX_TITLE_LENGTH:
            return text
    return None


def _slugify(text: str, *, fallback: str = "chart") -> str:
    cleaned = re.sub(r"[^A-Za-z0-9]+", "-", (text or "").strip()).strip("-").lower()
    return cleaned or fallback


def _iter_shapes(shapes) -> Iterator[Any]:
    for shape in shapes:
        if shape.shape_type == MSO_SHAPE_TYPE.GROUP:
            yield from _iter_shapes(shape.shapes)
        else:
            yield shape


def _alt_text(shape) -> List[str]:
    nv = getattr(shape._element, "_nvXxPr", None)
    c_nv_pr = getattr(nv, "cNvPr", None)
    if c_nv_pr is None:
        return []
    return [value for value in (c_nv_pr.get("title"), c_nv_pr.get("descr")) if value]


def _shape_text(shape) -> str:
    if not getattr(shape, "has_text_frame", False):
        return ""
    return shape.text_frame.text


def _is_rectangle(shape) -> bool:
    if shape.shape_type != MSO_SHAPE_TYPE.AUTO_SHAPE:
        return False
    try:
        return shape.auto_shape_type == MSO_AUTO_SHAPE_TYPE.RECTANGLE
    except ValueError:
        return False


def _image_size(image_bytes: bytes) -> Tuple[int, int]:
    from PIL import Image

    with Image.open(io.BytesIO(image_bytes)) as im:
        return im.size


def _contain_geometry(image_bytes: bytes, region: Region) -> Region:
    iw, ih = _image_size(image_bytes)

    box_w = float(region.width)
    box_h = float(region.height)
    if box_w <= 0 or box_h <= 0 or iw <= 0 or ih <= 0:
        return region
    ratio = iw / ih
    if ratio >= box_w / box_h:
        w = box_w
        h = box_w / ratio
    else:
        h = box_h
        w = box_h * ratio
    return Region(
        left=int(region.left + (box_w - w) / 2),
        top=int(region.top + (box_h - h) / 2),
        width=int(w),
        height=int(h),
    )


class SlideDeck:
    """Adapter over a ``pptx.Presentation``."""

    def __init__(self, presentation, *, source: Optional[Path] = None):
        self.prs = presentation
        self.source = source

    @classmethod
    def open(cls, path: Path) -> "SlideDeck":
        path = Path(path)
        return cls(Presentation(str(path)), source=path)

    @property
    def slides(self) -> List[Any]:
        return list(self.prs.slides)

    def save(self, output_path: Path) -> Path:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        self.prs.save(str(output))
        return output

    def list_text_shapes(self, slide) -> List[str]:
        return [text for text in (_shape_text(shape) for shape in _iter_shapes(slide.shapes)) if text]

    def slide_title(self, slide) -> Optional[str]:
        return extract_slide_title(self.list_text_shapes(slide))

    def find_placeholder(self, slide):
        """Shape named/alt-titled ``ImagePlaceholder``, else the largest empty rectangle."""
        shapes = list(_iter_shapes(slide.shapes))
        for shape in shapes:
            if shape.name == PLACEHOLDER_NAME or PLACEHOLDER_NAME in _alt_text(shape):
                logger.debug("Found placeholder by alt text")
                return shape

        best = None
        max_area = 0
        for shape in shapes:
            if not _is_rectangle(shape) or _shape_text(shape).strip():
                continue
            area = int(shape.width or 0) * int(shape.height or 0)
            if area > max_area:
                max_area = area
                best = shape
        if best is not None:
            logger.debug("Found placeholder as largest rectangle")
        return best

    def find_placeholder_region(self, slide) -> Optional[Region]:
        shape = self.find_placeholder(slide)
        if shape is None:
            return None
        return Region(left=int(shape.left), top=int(shape.top), width=int(shape.width), height=int(shape.height))

    def remove_shape(self, slide, shape) -> None:
        element = shape._element
        element.getparent().remove(element)

    def place_image(self, slide, region: Region, image_bytes: bytes):
        box = _contain_geometry(image_bytes, region)
        return slide.shapes.add_picture(io.BytesIO(image_bytes), box.left, box.top, width=box.width, height=box.height)

    def annotate_link(self, slide, region: Region, url: str):
        link_box = slide.shapes.add_textbox(region.left, region.top + region.height + Pt(10), region.width, Pt(20))
        tf = link_box.text_frame
        tf.clear()
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.LEFT
        run = p.add_run()
        run.text = LINK_LABEL
        run.font.size = Pt(10)
        run.font.bold = True
        run.font.color.rgb = LINK_COLOR
        run.hyperlink.address = url
        return link_box


class ChartSource(Protocol):
    def fetch_chart(self, url: str, *, slide_index: Optional[int] = None) -> ChartImage: ...


class ChartPopulator:
    """Fetches a rendered panel and puts it on the slide in place of its placeholder."""

    def __init__(self, deck: SlideDeck, source: ChartSource, *, assets_dir: Optional[Path] = None):
        self.deck = deck
        self.source = source
        self.assets_dir = Path(assets_dir) if assets_dir else None

    def __call__(
        self,
        slide,
        title: str,
        render_url: str,
        dashboard_link: Optional[str],
        *,
        slide_index: Optional[int] = None,
    ) -> None:
        logger.info("Processing chart: %s", title)
        placeholder = self.deck.find_placeholder(slide)
        if placeholder is not None:
            region = Region(
                left=int(placeholder.left),
                top=int(placeholder.top),
                width=int(placeholder.width),
                height=int(placeholder.height),
            )
        else:
            logger.debug("No placeholder found, using defaults")
            region = DEFAULT_REGION

        image = self.source.fetch_chart(render_url, slide_index=slide_index)
        self._check_decodable(image, slide_index)

        if placeholder is not None:
            self.deck.remove_shape(slide, placeholder)
        self.deck.place_image(slide, region, image.content)
        logger.info("Chart inserted")

        if self.assets_dir is not None:
            self._write_asset(title, image, slide_index)

        if dashboard_link:
            try:
                self.deck.annotate_link(slide, region, dashboard_link)
            except Exception as e:
                logger.warning("Could not add dashboard link for %s: %s", title, e)

    def _check_decodable(self, image: ChartImage, slide_index: Optional[int]) -> None:
        # The placeholder must survive a body that is labelled as an image but is not one.
        try:
            _image_size(image.content)
        except OSError as e:
            raise ChartRenderError(
                content_type=image.content_type,
                reason=f"Grafana returned an image that could not be decoded ({image.content_type})",
                slide_index=slide_index,
            ) from e

    def _write_asset(self, title: str, image: ChartImage, slide_index: Optional[int]) -> Path:
        self.assets_dir.mkdir(parents=True, exist_ok=True)
        number = (slide_index or 0) + 1
        out_path = self.assets_dir / f"{number:02d}-{_slugify(title)}.{image.extension}"
        out_path.write_bytes(image.content)
        logger.debug("Saved chart asset %s", out_path)
        return out_path
