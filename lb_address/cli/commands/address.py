"""
Address management commands.
"""

from typing import Optional

import typer

from lb_address.cli.lib.validators import (validate_ip, validate_name,
                                           validate_region)
from lb_address.loadbalancers.address_manager import (AddressManager,
                                                      ensure_address_deleted)
from lb_address.loadbalancers.configuration import CONF_GROUP, build_client
from lb_address.loadbalancers.exceptions import LBAddressException
from lb_address.loadbalancers.types import (ErrorClass, IPAddressType,
                                            LbScheme, NetworkTier)

app = typer.Typer(help="Address management commands")


def _conf(ctx: typer.Context):
    return ctx.obj[CONF_GROUP]


def _resolve_region(ctx: typer.Context, region: Optional[str]) -> str:
    region = region or _conf(ctx).region
    if not region:
        raise ValueError("Region is required (--region or [address_manager] region)")
    validate_region(region)
    return region


@app.command()
def hold(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the controller-owned address"),
    region: Optional[str] = typer.Option(None, "--region", help="Region (default: from config)"),
    ip: Optional[str] = typer.Option(None, "--ip", help="Desired IP address (default: any)"),
    scheme: Optional[str] = typer.Option(None, "--scheme", help="EXTERNAL or INTERNAL (default: from config)"),
    tier: Optional[str] = typer.Option(None, "--tier", help="Premium or Standard (default: from config)"),
    subnet: Optional[str] = typer.Option(None, "--subnet", help="Subnetwork URL (internal addresses)"),
    service: str = typer.Option("", "--service", help="Owning service name, recorded in the description"),
):
    """
    Reserve an address, or reuse the one already reserving the IP.

    Prints the IP address and whether it is managed by the controller.
    """
    address_type = IPAddressType.UNDEFINED
    try:
        validate_name(name)
        region = _resolve_region(ctx, region)
        target_ip = validate_ip(ip) if ip else ""
        conf = _conf(ctx)
        address_scheme = LbScheme.parse(scheme or conf.default_scheme)

        # The configured subnet only applies to internal addresses
        if not subnet and address_scheme is LbScheme.INTERNAL:
            subnet = conf.subnet_url

        manager = AddressManager(
            build_client(ctx.obj),
            service_name=service,
            region=region,
            subnet_url=subnet or "",
            name=name,
            target_ip=target_ip,
            address_type=address_scheme,
            network_tier=NetworkTier.parse(tier or conf.default_network_tier),
        )

        typer.echo(f"Holding address: {name}")
        address, address_type = manager.hold_address()
        typer.echo(f"  Address: {address}")
        typer.echo(f"  Type: {address_type.name.lower()}")

    except (LBAddressException, ValueError) as e:
        typer.echo(f"  Type: {address_type.name.lower()}")
        typer.echo(f"Error holding address: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def release(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the controller-owned address"),
    region: Optional[str] = typer.Option(None, "--region", help="Region (default: from config)"),
):
    """
    Release a controller-owned address.

    Only the address with the given name is deleted; a missing address is not an error.
    """
    try:
        validate_name(name)
        region = _resolve_region(ctx, region)

        typer.echo(f"Releasing address: {name}")
        ensure_address_deleted(build_client(ctx.obj), name, region)
        typer.echo(f"Address {name} released")

    except (LBAddressException, ValueError) as e:
        typer.echo(f"Error releasing address: {e}", err=True)
        raise typer.Exit(1)


@app.command("reconcile-tier")
def reconcile_tier(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of the controller-owned address"),
    ip: str = typer.Option(..., "--ip", help="IP address to check"),
    region: Optional[str] = typer.Option(None, "--region", help="Region (default: from config)"),
    tier: Optional[str] = typer.Option(None, "--tier", help="Premium or Standard (default: from config)"),
):
    """
    Delete the controller-owned address if it has the wrong network tier.

    A user-owned address with the wrong tier is reported and left alone.
    """
    try:
        validate_name(name)
        region = _resolve_region(ctx, region)
        conf = _conf(ctx)

        manager = AddressManager(
            build_client(ctx.obj),
            service_name="",
            region=region,
            subnet_url="",
            name=name,
            target_ip=validate_ip(ip),
            address_type=LbScheme.EXTERNAL,
            network_tier=NetworkTier.parse(tier or conf.default_network_tier),
        )
        manager.tear_down_address_ip_if_network_tier_mismatch()
        typer.echo(f"Network tier of {ip} reconciled")

    except (LBAddressException, ValueError) as e:
        typer.echo(f"Error reconciling network tier: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def show(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Address name"),
    ip: Optional[str] = typer.Option(None, "--ip", help="Look the address up by IP instead"),
    region: Optional[str] = typer.Option(None, "--region", help="Region (default: from config)"),
):
    """
    Show an address by name or by IP.
    """
    try:
        if not name and not ip:
            raise ValueError("Either NAME or --ip is required")
        region = _resolve_region(ctx, region)
        svc = build_client(ctx.obj)

        try:
            if ip:
                addr = svc.get_region_address_by_ip(region, validate_ip(ip))
            else:
                validate_name(name)
                addr = svc.get_region_address(name, region)
        except LBAddressException as e:
            if svc.classify_error(e) is not ErrorClass.NOT_FOUND:
                raise
            typer.echo(f"Address {ip or name} not found in region {region}")
            raise typer.Exit(1)

        typer.echo(f"Name: {addr.name}")
        typer.echo(f"  Address: {addr.address}")
        typer.echo(f"  Type: {addr.address_type}")
        typer.echo(f"  Network tier: {addr.network_tier}")
        if addr.subnetwork:
            typer.echo(f"  Subnetwork: {addr.subnetwork}")
        if addr.description:
            typer.echo(f"  Description: {addr.description}")

    except (LBAddressException, ValueError) as e:
        typer.echo(f"Error showing address: {e}", err=True)
        raise typer.Exit(1)
