"""System info tool: host, CPU, memory, disks and uptime."""

from __future__ import annotations

import asyncio
import logging
import platform
import time
from typing import Any, ClassVar

import psutil
from pydantic import BaseModel

from shellwright.tool.base import BaseTool, ToolOk, ToolResult

logger = logging.getLogger(__name__)

GB = 1024**3
# Sampling window for the CPU usage reading
CPU_SAMPLE_S = 0.1


class SystemInfoParams(BaseModel):
    pass


def _gb(value: float) -> float:
    return round(value / GB, 1)


def _disks() -> list[dict[str, Any]]:
    disks = []
    for part in psutil.disk_partitions(all=False):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except OSError as e:
            logger.debug("Skipping mount %s: %s", part.mountpoint, e)
            continue
        if not usage.total:
            continue
        disks.append(
            {
                "name": part.mountpoint,
                "total_gb": _gb(usage.total),
                "free_gb": _gb(usage.free),
                "percent_used": round(usage.percent),
            }
        )
    return disks


class SystemInfoTool(BaseTool[SystemInfoParams]):
    name: ClassVar[str] = "system_info"
    description: ClassVar[str] = (
        "Get system information: hostname, OS, uptime, CPU model, core count and "
        "usage, memory usage, and disk usage per mounted filesystem."
    )
    param_model: ClassVar[type[BaseModel]] = SystemInfoParams

    async def execute(self, params: SystemInfoParams) -> ToolResult:
        # cpu_percent sleeps for the sample window
        cpu_usage = await asyncio.to_thread(psutil.cpu_percent, CPU_SAMPLE_S)
        mem = psutil.virtual_memory()
        return ToolOk(
            data={
                "hostname": platform.node() or "Unknown",
                "os": platform.platform(),
                "uptime_hours": round((time.time() - psutil.boot_time()) / 3600, 1),
                "cpu": {
                    "name": platform.processor() or platform.machine() or "Unknown",
                    "cores": psutil.cpu_count(logical=True) or 0,
                    "usage_percent": cpu_usage,
                },
                "memory": {
                    "total_gb": _gb(mem.total),
                    "used_gb": _gb(mem.total - mem.available),
                    "percent": round(mem.percent),
                },
                "disks": _disks(),
            }
        )
