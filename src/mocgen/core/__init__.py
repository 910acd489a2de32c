"""Core model: notes, links, markdown AST and serializer."""
