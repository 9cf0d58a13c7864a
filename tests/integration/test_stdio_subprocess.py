"""
Run a server in a child process over real stdin/stdout pipes.

Stdout must carry protocol lines only; logs belong on stderr.
"""

import json
import os
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

pytestmark = pytest.mark.integration

PROJECT_ROOT = Path(__file__).resolve().parents[2]

SERVER_SCRIPT = textwrap.dedent(
    """
    import asyncio

    from pydantic import BaseModel

    from mcpline import create_server


    class AddInput(BaseModel):
        a: int
        b: int


    def add(data, ctx):
        ctx.logger.info({"a": data.a, "b": data.b}, "Adding numbers")
        return {"result": data.a + data.b}


    server = create_server().tool("add", input=AddInput, output=dict, handler=add)
    asyncio.run(server.listen())
    """
)


def run_server(tmp_path, lines):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))
    env["MCPLINE_HANDLE_SIGNALS"] = "false"
    return subprocess.run(
        [sys.executable, "-c", SERVER_SCRIPT],
        input="".join(line + "\n" for line in lines),
        capture_output=True,
        text=True,
        cwd=tmp_path,
        env=env,
        timeout=60,
    )


class TestStdioSubprocess:
    """Test the default stdio transport end to end."""

    def test_stdout_carries_only_protocol_lines(self, tmp_path):
        request = {"protocolVersion": "2.0", "id": 1, "method": "tool", "params": {"name": "add", "input": {"a": 5, "b": 3}}}

        completed = run_server(tmp_path, [json.dumps(request), "{broken"])

        assert completed.returncode == 0, completed.stderr
        stdout_lines = completed.stdout.splitlines()
        messages = [json.loads(line) for line in stdout_lines]
        assert len(messages) == 2
        assert all(message["protocolVersion"] == "2.0" for message in messages)
        assert '{"protocolVersion":"2.0","id":1,"result":{"result":8}}' in stdout_lines
        assert "Server built" in completed.stderr
        assert "Adding numbers" in completed.stderr
