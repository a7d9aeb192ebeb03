# Marks `portal.deps` as a real Python package so imports like
# `from portal.deps.auth import require_login` work reliably.
