"""OntoMaker: diagram editor for ontology schemas."""

__version__ = "0.3.0"
