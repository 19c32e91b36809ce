"""Mappers resolve evidence against catalogs using evaluation plans."""
