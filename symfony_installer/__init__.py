"""Symfony Installer -- creates new Symfony projects from versioned archives.

Quick usage::

    symfony new blog
    symfony new blog 2.8
    symfony demo
"""

__version__ = "1.6.0"
