# cartboard/services/catalog.py
from __future__ import annotations

import logging
import re
import threading
import uuid
from typing import Dict, List, Optional

from ..errors import TemplateNotFound, ValidationError
from ..schemas.catalog import ProductTemplate, ProductTemplateOut
from .store import TemplateStore

logger = logging.getLogger(__name__)

# The workshop's catalog as first shipped; used to seed an empty store.
DEFAULT_TEMPLATES: List[ProductTemplate] = [
    ProductTemplate(id="burnPad", name="Burn Pad",
                    specs=["baseColor", "corduraColor", "logoColor"], sortOrder=0),
    ProductTemplate(id="foamPad", name="Foam Pad",
                    specs=["baseColor", "seatColor", "trimColor", "pipingColor",
                           "wearLeatherColor", "logoColor"], sortOrder=1),
    ProductTemplate(id="bandageHolder", name="Bandage Holder",
                    specs=["baseColor", "logoColor", "grommetColor"], sortOrder=2),
    ProductTemplate(id="paddockBag", name="Paddock Bag",
                    specs=["baseColor", "handleColor", "logoColor"], sortOrder=3),
    ProductTemplate(id="schoolingPad", name="Schooling Pad",
                    specs=["baseColor", "pipingColor", "logoColor"], sortOrder=4),
    ProductTemplate(id="raincover", name="Raincover",
                    specs=["baseColor", "logoColor"], sortOrder=5),
    ProductTemplate(id="blanket", name="Blanket",
                    specs=["type", "baseColor", "trimColor", "logoColor"], sortOrder=6),
    ProductTemplate(id="saddle", name="Saddle",
                    specs=["type", "baseColor", "stitchColor", "topAccentColor",
                           "bottomAccentColor"], sortOrder=7),
]

NEW_PRODUCT_NAME = "New Product"


# --- SPEC NAMES ---------------------------------------------------------------
def normalize_spec_name(raw: str) -> str:
    """'Base Color' -> 'baseColor'."""
    s = re.sub(r"\s+", "", (raw or "").strip())
    return s[:1].lower() + s[1:]


def format_spec_name(key: str) -> str:
    """'baseColor' -> 'Base Color'."""
    s = re.sub(r"([A-Z])", r" \1", key or "")
    return s[:1].upper() + s[1:]


def template_out(t: ProductTemplate) -> ProductTemplateOut:
    return ProductTemplateOut(**t.model_dump(), specLabels=[format_spec_name(s) for s in t.specs])


# --- REGISTRY -----------------------------------------------------------------
class CatalogRegistry:
    """
    Administrator-maintained product templates.

    Each edit is written through to the template store before the in-memory
    copy changes. Orders keep their own product snapshot, so nothing here
    touches existing orders.
    """

    def __init__(self, store: TemplateStore):
        self._store = store
        self._lock = threading.RLock()
        self._templates: Dict[str, ProductTemplate] = {}

    def load(self, seed_defaults: bool = True) -> None:
        templates = self._store.list_templates()
        if not templates and seed_defaults:
            logger.info("catalog is empty, seeding %d default templates", len(DEFAULT_TEMPLATES))
            for t in DEFAULT_TEMPLATES:
                self._store.save_template(t)
            templates = [t.model_copy(deep=True) for t in DEFAULT_TEMPLATES]
        with self._lock:
            self._templates = {t.id: t for t in templates}

    # --- READ ---
    def ordered(self) -> List[ProductTemplate]:
        with self._lock:
            return sorted(self._templates.values(), key=lambda t: (t.sortOrder, t.name))

    def get(self, template_id: str) -> ProductTemplate:
        with self._lock:
            t = self._templates.get(template_id)
        if t is None:
            raise TemplateNotFound(template_id)
        return t

    # --- WRITE ---
    def _put(self, t: ProductTemplate) -> ProductTemplate:
        self._store.save_template(t)
        self._templates[t.id] = t
        return t

    def add(self, name: Optional[str] = None) -> ProductTemplate:
        with self._lock:
            next_order = max((t.sortOrder for t in self._templates.values()), default=-1) + 1
            t = ProductTemplate(
                id=uuid.uuid4().hex[:20],
                name=(name or "").strip() or NEW_PRODUCT_NAME,
                specs=[],
                sortOrder=next_order,
            )
            logger.info("adding product template %s (%s)", t.id, t.name)
            return self._put(t)

    def rename(self, template_id: str, name: str) -> ProductTemplate:
        name = (name or "").strip()
        if not name:
            raise ValidationError("product name is required")
        with self._lock:
            t = self.get(template_id)
            return self._put(t.model_copy(update={"name": name}))

    def add_spec(self, template_id: str, raw_name: str) -> ProductTemplate:
        key = normalize_spec_name(raw_name)
        if not key:
            raise ValidationError("spec name is required")
        with self._lock:
            t = self.get(template_id)
            if key in t.specs:
                raise ValidationError(f"{t.name} already has a {format_spec_name(key)} field")
            return self._put(t.model_copy(update={"specs": [*t.specs, key]}))

    def remove_spec(self, template_id: str, spec: str) -> ProductTemplate:
        with self._lock:
            t = self.get(template_id)
            if spec not in t.specs:
                raise ValidationError(f"{t.name} has no {spec} field")
            return self._put(t.model_copy(update={"specs": [s for s in t.specs if s != spec]}))

    def delete(self, template_id: str) -> None:
        # sort orders of the remaining templates are left as they are
        with self._lock:
            self.get(template_id)
            self._store.delete_template(template_id)
            del self._templates[template_id]
        logger.info("deleted product template %s", template_id)

    def move(self, template_id: str, position: int) -> List[ProductTemplate]:
        """Move a template to `position` and renumber all sort orders densely."""
        with self._lock:
            t = self.get(template_id)
            rest = [x for x in self.ordered() if x.id != template_id]
            position = max(0, min(position, len(rest)))
            rest.insert(position, t)
            for i, x in enumerate(rest):
                if x.sortOrder != i:
                    self._put(x.model_copy(update={"sortOrder": i}))
            return self.ordered()
