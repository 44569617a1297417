"""Exception hierarchy for SSH Manager services."""


class SSHManagerError(Exception):
    """Base class for errors surfaced to the user."""


class HostValidationError(SSHManagerError, ValueError):
    """Connection form input is incomplete or invalid."""


class KeyManagerError(SSHManagerError):
    """ssh-keygen failed while generating a key."""


class KnownHostsError(SSHManagerError):
    """A known_hosts entry could not be removed."""


class PortForwardingError(SSHManagerError):
    """A forwarding rule could not be started or stopped."""


class ForwardingValidationError(PortForwardingError, ValueError):
    """Forwarding rule input is incomplete or invalid."""


class TerminalLaunchError(SSHManagerError):
    """No terminal could be opened for an SSH command."""
