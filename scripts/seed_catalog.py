import argparse
import json
from typing import List

from cartboard.schemas.catalog import ProductTemplate
from cartboard.services.catalog import DEFAULT_TEMPLATES
from cartboard.services.store import FirestoreTemplateStore
from cartboard.settings import settings


def load_templates(path: str) -> List[ProductTemplate]:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    # accept either a list of templates or the {id: template} mapping the UI exports
    if isinstance(raw, dict):
        raw = [{"id": k, **v} for k, v in raw.items()]
    return [ProductTemplate.model_validate(t) for t in raw]


def seed(templates: List[ProductTemplate], collection: str, replace: bool) -> None:
    store = FirestoreTemplateStore(collection)
    if replace:
        for t in store.list_templates():
            store.delete_template(t.id)
    for t in templates:
        store.save_template(t)
    print(f"Wrote {len(templates)} product templates -> {collection}")


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Seed the Firestore product catalog")
    ap.add_argument('--file', help='JSON file with templates (defaults to the built-in catalog)')
    ap.add_argument('--collection', default=settings.templates_collection)
    ap.add_argument('--replace', action='store_true', help='delete existing templates first')
    args = ap.parse_args()
    templates = load_templates(args.file) if args.file else DEFAULT_TEMPLATES
    seed(templates, args.collection, args.replace)
