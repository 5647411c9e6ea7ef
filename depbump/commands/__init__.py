"""Click subcommands registered on the ``depbump`` group."""
