from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import click
import serial  # type: ignore

from . import __version__
from .board import B15F
from .codec import encode_frequency
from .config import DEFAULT_CONFIG_PATH, get_serial_config, load_config
from .discovery import AutoDiscovery
from .errors import B15FError


def _parse_int(value: str, name: str, maximum: int) -> int:
    # int(x, 0) accepts 0x.., 0o.., 0b.., or decimal
    try:
        v = int(value, 0)
    except ValueError:
        raise click.BadParameter(f"Invalid number: {value}", param_hint=name)
    if not (0 <= v <= maximum):
        raise click.BadParameter(f"{value} out of range (0-{maximum})", param_hint=name)
    return v


@contextmanager
def _board(ctx: click.Context) -> Iterator[B15F]:
    port: Optional[str] = ctx.obj["port"]
    timeout: float = ctx.obj["timeout"]
    try:
        if port:
            board = B15F.open_port(port, timeout=timeout)
        else:
            board = B15F.instance(timeout=timeout)
            click.echo(f"Using discovered board on {board.port_name}", err=True)
    except (B15FError, serial.SerialException, OSError) as e:
        raise click.ClickException(str(e))
    with board:
        try:
            yield board
        except (B15FError, serial.SerialException, OSError) as e:
            raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__)
@click.option("-p", "--port", help="Serial port (e.g., /dev/ttyUSB0, COM3). If not specified, will auto-discover.")
@click.option("-t", "--timeout", type=click.FloatRange(min=0), help="Read timeout in seconds")
@click.option("-c", "--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True, help="TOML config file")
@click.option("-v", "--verbose", is_flag=True, help="Log protocol traffic")
@click.pass_context
def cli(ctx: click.Context, port: Optional[str], timeout: Optional[float], config_path: str, verbose: bool) -> None:
    """Talk to a B15F I/O board over serial.

    Examples:

      # Auto-discover the board and run the self-test
      b15f test

      # Write 0xAA to digital port 0 on a specific port
      b15f -p /dev/ttyUSB0 digital-write 0 0xAA

      # Read analog channel 3
      b15f analog-read 3
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    cfg_port, cfg_timeout = get_serial_config(load_config(config_path))
    ctx.ensure_object(dict)
    ctx.obj["port"] = port or cfg_port
    ctx.obj["timeout"] = timeout if timeout is not None else cfg_timeout


@cli.command()
@click.pass_context
def ports(ctx: click.Context) -> None:
    """List serial ports in the order discovery probes them."""
    candidates = AutoDiscovery(timeout=ctx.obj["timeout"]).candidates()
    if not candidates:
        click.echo("No serial ports found.")
        return
    for c in candidates:
        click.echo(f"{c.name}\t{c.port_type.name}")


@cli.command()
@click.pass_context
def test(ctx: click.Context) -> None:
    """Run the echo self-test."""
    with _board(ctx) as board:
        passed = board.test()
    if not passed:
        raise click.ClickException("Self-test failed: echo mismatch")
    click.echo("Self-test passed")


@cli.command("digital-write")
@click.argument("port")
@click.argument("value")
@click.pass_context
def digital_write(ctx: click.Context, port: str, value: str) -> None:
    """Write VALUE (0-255) to digital PORT (0 or 1)."""
    p = _parse_int(port, "PORT", 1)
    v = _parse_int(value, "VALUE", 0xFF)
    with _board(ctx) as board:
        board.digital_write(p, v)
    click.echo("OK")


@cli.command("digital-read")
@click.argument("port")
@click.pass_context
def digital_read(ctx: click.Context, port: str) -> None:
    """Read digital PORT (0 or 1)."""
    p = _parse_int(port, "PORT", 1)
    with _board(ctx) as board:
        v = board.digital_read(p)
    click.echo(f"0x{v:02x} (0b{v:08b})")


@cli.command("analog-write")
@click.argument("port")
@click.argument("value")
@click.pass_context
def analog_write(ctx: click.Context, port: str, value: str) -> None:
    """Write VALUE (0-1023) to analog output PORT (0 or 1)."""
    p = _parse_int(port, "PORT", 1)
    v = _parse_int(value, "VALUE", 1023)
    with _board(ctx) as board:
        board.analog_write(p, v)
    click.echo("OK")


@cli.command("analog-read")
@click.argument("channel")
@click.pass_context
def analog_read(ctx: click.Context, channel: str) -> None:
    """Read analog input CHANNEL (0-7)."""
    ch = _parse_int(channel, "CHANNEL", 7)
    with _board(ctx) as board:
        v = board.analog_read(ch)
    click.echo(str(v))


@cli.command("pwm-freq")
@click.argument("frequency", type=float)
@click.pass_context
def pwm_freq(ctx: click.Context, frequency: float) -> None:
    """Set the PWM frequency in Hz and print the board's raw answer."""
    try:
        encode_frequency(frequency)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="FREQUENCY")
    with _board(ctx) as board:
        response = board.set_pwm_frequency(frequency)
    click.echo(f"Response: 0x{response:02x}")


@cli.command("pwm-value")
@click.argument("value")
@click.pass_context
def pwm_value(ctx: click.Context, value: str) -> None:
    """Set the PWM duty VALUE (0-255)."""
    v = _parse_int(value, "VALUE", 0xFF)
    with _board(ctx) as board:
        board.set_pwm_value(v)
    click.echo("OK")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
