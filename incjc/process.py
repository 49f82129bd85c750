import asyncio
import codecs
import io
import logging
import sys
from typing import List, Optional, TextIO

from incjc.exceptions import ToolError

CHUNK_SIZE = 65536

logger = logging.getLogger(__name__)

async def pump_stream(stream: asyncio.StreamReader, sink: TextIO) -> None:
    """Drain ``stream`` into ``sink`` until EOF.

    Decoding is incremental so multibyte characters split across reads
    survive intact.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            break
        sink.write(decoder.decode(chunk))
    sink.write(decoder.decode(b"", final=True))
    sink.flush()

async def run_process(cmd: List[str], stdout: Optional[TextIO] = None,
                      stderr: Optional[TextIO] = None) -> int:
    """Run a command, streaming its output, and return the exit status.

    Both pipes are drained by their own task while the process runs so
    that a chatty child never blocks on a full pipe. The exit status is
    only returned once the process has exited and both pumps are done.

    Args:
        cmd: Executable and arguments
        stdout: Sink for standard output, defaults to ``sys.stdout``
        stderr: Sink for standard error, defaults to ``sys.stderr``

    Raises:
        ToolError: If the executable cannot be launched
    """
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    logger.debug(" ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolError(f"Failed to run {cmd[0]}: {e}") from e

    pumps = [
        asyncio.create_task(pump_stream(proc.stdout, stdout)),
        asyncio.create_task(pump_stream(proc.stderr, stderr)),
    ]
    retval = await proc.wait()
    await asyncio.gather(*pumps)
    return retval

async def get_process_output(cmd: List[str]) -> str:
    """Run a command and return its standard output.

    Raises:
        ToolError: If the command cannot be launched or exits nonzero
    """
    output = io.StringIO()
    retval = await run_process(cmd, stdout=output)
    if retval != 0:
        raise ToolError(f"Nonzero return value of {retval} was returned by {' '.join(cmd)}")
    return output.getvalue()
