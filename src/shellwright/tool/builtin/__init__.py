"""Built-in tools."""

from shellwright.tool.builtin.delete_file import DeleteFileTool
from shellwright.tool.builtin.edit_file import EditFileTool
from shellwright.tool.builtin.file_info import FileInfoTool
from shellwright.tool.builtin.interactive import ProcessInteractiveTool
from shellwright.tool.builtin.list_dir import CreateDirTool, ListDirTool
from shellwright.tool.builtin.move_file import MoveFileTool
from shellwright.tool.builtin.processes import ProcessesTool, ProcessKillTool
from shellwright.tool.builtin.read_file import ReadFileTool
from shellwright.tool.builtin.search import SearchTool
from shellwright.tool.builtin.shell import ShellTool
from shellwright.tool.builtin.system_info import SystemInfoTool
from shellwright.tool.builtin.write_file import WriteFileTool

__all__ = [
    "CreateDirTool",
    "DeleteFileTool",
    "EditFileTool",
    "FileInfoTool",
    "ListDirTool",
    "MoveFileTool",
    "ProcessInteractiveTool",
    "ProcessKillTool",
    "ProcessesTool",
    "ReadFileTool",
    "SearchTool",
    "ShellTool",
    "SystemInfoTool",
    "WriteFileTool",
]
