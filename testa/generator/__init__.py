"""Test file generation.

:mod:`testa.generator.test_templates` turns a category, a name and an
optional selection into test source text; :mod:`testa.generator.writer`
places that text in the project's test tree.
"""

from testa.generator.test_templates import render_test
from testa.generator.writer import SpecWriter, detect_base_dir, resolve_test_path, target_dir_name

__all__ = [
    "render_test",
    "SpecWriter",
    "detect_base_dir",
    "resolve_test_path",
    "target_dir_name",
]
