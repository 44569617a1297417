"""SSH Manager - desktop front end for ssh-keygen, ssh and the SSH client config."""

__version__ = "1.0.0"
APP_ID = "io.github.sshmanager.SSHManager"
APP_NAME = "sshmanager"
