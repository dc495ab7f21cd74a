#!/usr/bin/env python3

# WARNING: do NOT do a relative import, this file must be directly executable
# by filename
from commitmcp import cli

if __name__ == "__main__":
    cli()
