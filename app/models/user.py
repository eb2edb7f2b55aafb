from schemadb.db.schema import Schema


def user_schema(**options) -> Schema:
    """A fresh Schema per call: a Schema belongs to exactly one Model."""
    return Schema({
        "name": {"type": "text", "required": True, "min": 2, "max": 40},
        "email": {
            "type": "text",
            "required": True,
            "unique": True,
            "match": (r"^[^@\s]+@[^@\s]+\.[^@\s]+$", "email is not a valid address"),
        },
        "age": {"type": "number", "default": 18, "min": 0, "max": 150},
        "active": {"type": "boolean", "default": True},
        "tags": list,
        "birthday": "temporal",
        # virtuals
        "label": lambda self: f"{self['name']} <{self['email']}>",
        "adult": lambda self: self["age"] >= 18,
    }, options)


def register(db, name: str = "user", **options):
    return db.model(name, user_schema(**options))
