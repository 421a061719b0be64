"""Example usage of the surql_gen library."""

from surql_gen import Schema, render_shape

# Describe tables and fields with SurrealQL DDL
ddl = """
-- People who write things
DEFINE TABLE user SCHEMAFULL;
DEFINE FIELD name ON user TYPE string COMMENT "Display name";
DEFINE FIELD email ON user TYPE string;
DEFINE FIELD age ON user TYPE option<int>;

DEFINE TABLE post SCHEMAFULL COMMENT "Blog posts";
DEFINE FIELD title ON post TYPE string;
DEFINE FIELD author ON post TYPE record<user>;
DEFINE FIELD likes ON post TYPE array<record<user>>;
DEFINE FIELD created ON post TYPE datetime
    VALUE time::now()
    COMMENT "Creation time";
DEFINE FIELD embedding ON post TYPE array<number>;
"""

# Parse the DDL and build the registry used for query inference
schema = Schema.parse(ddl)

print("Tables:")
for name in schema.list_tables():
    table = schema.get_table(name)
    print(f"  {table.name}: {table.description or ''}")
    for field in table.fields:
        marker = "?" if field.optional else ""
        target = f" -> {field.reference.table}" if field.reference else ""
        print(f"    {field.name}{marker}: {field.type}{target}")

# Infer the result shape of some queries
queries = [
    "SELECT * FROM user LIMIT 1",
    "SELECT title, author.* FROM post",
    "SELECT *, likes.name FROM post",
    "CREATE post SET title = 'Hello'",
]

print("\nQuery shapes:")
for query in queries:
    print(f"  {query}")
    print(f"    {render_shape(schema.infer(query))}")
