# Sphinx configuration for the anomalica API reference.
import os
import sys
sys.path.insert(0, os.path.abspath('../../src'))

project = 'anomalica'
author = 'anomalica developers'
release = '0.1.0'

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.viewcode',
    'numpydoc',
    'sphinx_autodoc_typehints',
]

# module docstrings list their own classes and methods
numpydoc_show_class_members = False
autodoc_member_order = 'bysource'

templates_path = ['_templates']
exclude_patterns = []

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']
