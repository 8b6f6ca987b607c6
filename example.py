"""Example of checking queries with gqlguard and graphql-core."""

from graphql import build_schema

from gqlguard import QueryGuard

SCHEMA = build_schema("""
type Author {
    name: String
    books: [Book]
}

type Book {
    title: String
    author: Author
}

type Query {
    books: [Book]
}
""")

QUERIES = {
    "simple": "{ books { title } }",
    "aliased": "{ a: books { title } b: books { title } c: books { title } }",
    "deep": "{ books { author { books { author { name } } } } }",
    "cyclic": """
        { ...A }
        fragment A on Query { ...B }
        fragment B on Query { ...A }
    """,
}


def main():
    guard = QueryGuard(max_aliases=2, max_depth=4)

    for name, query in QUERIES.items():
        errors = guard.validate(SCHEMA, query)
        if errors:
            print(f"❌ {name}")
            for error in errors:
                print(f"   • {error.message}")
        else:
            print(f"✅ {name}")

    print(f"\n📊 Stats: {guard.get_stats()}")


if __name__ == "__main__":
    main()
