"""kit-updater: upgrade an installed component tree from a remote branch.

The engine fetches a newer copy of the tree, merges the installed
configuration document with the incoming one (user values win), copies
every incoming file over the installed tree and keeps a backup of the
previous state for manual recovery.
"""

__version__ = "0.3.0"
