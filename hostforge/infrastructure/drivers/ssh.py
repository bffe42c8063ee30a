"""
SSH Transport

Architectural Intent:
- Remote shell used by drivers to implement get_ssh_command()
- Wraps Fabric Connection; one command per SSHCommand.run(), and the
  connection is closed once that command finishes or fails

Security:
- SSH connections use connect_timeout, allow_agent, look_for_keys
- Error messages carry only the first line of a command so uploaded key
  material never reaches logs
"""

import logging
from typing import Optional

from fabric import Connection
from paramiko.ssh_exception import SSHException

from hostforge.domain.errors import RemoteCommandError

logger = logging.getLogger(__name__)

SSH_CONNECT_TIMEOUT = 30


def open_connection(
    host: str,
    user: str,
    port: int = 22,
    key_filename: Optional[str] = None,
) -> Connection:
    connect_kwargs: dict = {
        "allow_agent": True,
        "look_for_keys": True,
    }
    if key_filename:
        connect_kwargs["key_filename"] = key_filename
    return Connection(
        host=host,
        user=user,
        port=port,
        connect_timeout=SSH_CONNECT_TIMEOUT,
        connect_kwargs=connect_kwargs,
    )


def _summarize(command: str) -> str:
    first_line = command.splitlines()[0] if command else ""
    return first_line[:80]


class SSHCommand:
    """RemoteCommand implementation running over a Fabric connection."""

    def __init__(self, connection: Connection, command: str):
        self.connection = connection
        self.command = command

    def run(self) -> None:
        summary = _summarize(self.command)
        logger.debug("Running remote command on %s: %s", self.connection.host, summary)
        try:
            result = self.connection.run(self.command, hide=True, warn=True, in_stream=False)
        except (OSError, SSHException) as e:
            raise RemoteCommandError(summary, f"ssh to {self.connection.host} failed: {e}") from e
        finally:
            self.connection.close()
        if result.failed:
            raise RemoteCommandError(
                summary,
                f"exit status {result.exited}: {result.stderr.strip()}",
                exit_code=result.exited,
            )
