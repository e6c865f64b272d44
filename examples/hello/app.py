"""Hello World -- the simplest jinja_schema example.

Extract the variables of a template string and print sample data for them.
No templates directory needed.

Run:
    python app.py
"""

from jinja_schema import extract_schema

schema = extract_schema("Hello, {{ name }}! You have {{ unread_count }} new messages.")

# Placeholder data, ready to render the template with
sample = schema.to_sample()

output = schema.to_json()


def main() -> None:
    print(output)
    print()

    # Each variable and its inferred type
    for name in schema:
        print(f"{name}: {schema.describe(name)}")


if __name__ == "__main__":
    main()
