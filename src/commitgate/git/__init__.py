"""Git repository access for commitgate."""

from commitgate.git.provider import GitChangeSetProvider, parse_ref_updates

__all__ = ["GitChangeSetProvider", "parse_ref_updates"]
