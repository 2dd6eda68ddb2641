"""Routing — route descriptors, URI templates, the route set and the URL router.

Routes are built through factories and never change afterwards, apart
from their ``should_escape_path`` hint.
"""
