"""testa -- scaffolding and test generation for JavaScript test automation projects."""

__version__ = "1.0.0"
