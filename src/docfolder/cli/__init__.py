"""
docfolder CLI -- bind, list, load and save documents in a granted folder.

The main Click group is defined here and the command groups are
registered from their modules.

Entry point: docfolder.cli:main
"""

from __future__ import annotations

import logging

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="docfolder")
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr.")
def main(verbose):
    """docfolder -- keep JSON documents saved in a folder you choose."""
    if verbose:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s")
        )
        root = logging.getLogger("docfolder")
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)


from .folder import register_folder_commands
from .document import register_document_commands

register_folder_commands(main)
register_document_commands(main)
