"""Sample context -- preview data for a template file.

Demonstrates the analysis API on a realistic page template: the inferred
schema, diagnostics, cross-file dependencies, the path queries an editor
uses for completion, and merging a regenerated sample with data the user
already edited.

Run:
    python app.py
"""

import json
from pathlib import Path

from jinja_schema import analyze_template, merge_samples

templates_dir = Path(__file__).parent / "templates"
source = (templates_dir / "page.html").read_text(encoding="utf-8")

analysis = analyze_template(source)
schema = analysis.schema

# Placeholder data for every free variable
sample = schema.to_sample()

# Templates this one depends on (never read)
templates = analysis.templates

# Completion: keys next to page.title, and what page.tags holds
title_siblings = schema.siblings("page.title")
tags_type = schema.describe("page.tags")

# The user filled in some values earlier; one variable has since been removed
edited = {
    "page": {"title": "Release notes", "author": {"name": "Alice", "email": ""}},
    "site_name": "My Site",
    "sidebar": ["stale"],
}
merged = merge_samples(sample, edited)

lines = [
    f"Variables: {list(schema)}",
    f"Templates: {templates}",
    f"Siblings of page.title: {title_siblings}",
    f"page.tags: {tags_type}",
    f"Clean: {analysis.is_clean}",
]
output = "\n".join(lines)


def main() -> None:
    print("=== Sample Context ===\n")
    for line in lines:
        print(f"  {line}")
    print("\n  Merged sample:")
    print(json.dumps(merged, indent=2))


if __name__ == "__main__":
    main()
