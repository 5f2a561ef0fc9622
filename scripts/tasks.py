#!/usr/bin/python3
"""
Runs the chaintasks commands through ape, e.g.

    ape run tasks deploy --contract ArtToken --upgradeable --network ethereum:local:node
"""
from chaintasks.cli import cli

if __name__ == "__main__":
    cli()
