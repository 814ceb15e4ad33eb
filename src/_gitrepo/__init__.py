"""Clone and inspect Git repositories through the ``git`` executable.

.. module:: _gitrepo
    :synopsis: Implementation package of gitrepo.
"""
from _gitrepo.__version import __version__  # NOQA

_external_package_name = "gitrepo"
__author__ = "gitrepo developers"
