# deploy_pilot/supervisor/pm2.py
"""PM2 supervisor driven through a transport"""

import shlex

from .base import ProcessSupervisor
from ..models.config import SupervisorConfig
from ..transport.base import Transport


class PM2Supervisor(ProcessSupervisor):
    """PM2 commands executed inside the deployed-state directory"""

    def __init__(self, transport: Transport, config: SupervisorConfig, app_dir: str):
        self.transport = transport
        self.config = config
        self.app_dir = app_dir

    def _command(self, *args: str) -> str:
        pm2 = " ".join([self.config.binary, *(shlex.quote(a) for a in args)])
        return f"cd {shlex.quote(self.app_dir)} && {pm2}"

    async def describe(self, name: str) -> bool:
        result = await self.transport.run(self._command("describe", name), check=False)
        return result.ok

    async def start(self) -> None:
        await self.transport.run(self._command(
            "start", self.config.ecosystem_file,
            "--env", self.config.environment,
        ))

    async def reload(self, update_env: bool = True) -> None:
        args = ["reload", self.config.ecosystem_file, "--env", self.config.environment]
        if update_env:
            args.append("--update-env")
        await self.transport.run(self._command(*args))

    async def save(self) -> None:
        await self.transport.run(self._command("save"))
