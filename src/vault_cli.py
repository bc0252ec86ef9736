import click

from core.config import settings
from core.exceptions import VaultError
from log import setup_logging
from services.conversion import ConversionEngine, PoolState, policy_from_offset
from services.simulation import simulate_donation_attack
from utils.fixed_point import Rounding


@click.group()
@click.option("--log-to-file", is_flag=True, default=False, help="Also write logs to a file")
def cli(log_to_file: bool):
    setup_logging("vault_cli", to_file=log_to_file)


@cli.command()
@click.option("--total-assets", type=int, required=True, help="Assets held by the vault")
@click.option("--total-shares", type=int, required=True, help="Shares outstanding")
@click.option("--amount", type=int, required=True, help="Amount to convert")
@click.option(
    "--to",
    "direction",
    type=click.Choice(["shares", "assets"]),
    default="shares",
    help="Convert assets to shares or shares to assets",
)
@click.option(
    "--rounding", type=click.Choice([r.value for r in Rounding]), default=Rounding.down.value
)
@click.option("--decimals-offset", type=int, default=settings.VAULT_DECIMALS_OFFSET)
def convert(
    total_assets: int,
    total_shares: int,
    amount: int,
    direction: str,
    rounding: str,
    decimals_offset: int,
):
    """Convert an amount against a given pool state."""
    engine = ConversionEngine(policy_from_offset(decimals_offset))
    pool = PoolState(total_assets=total_assets, total_shares=total_shares)
    try:
        if direction == "shares":
            result = engine.to_shares(pool, amount, Rounding(rounding))
        else:
            result = engine.to_assets(pool, amount, Rounding(rounding))
    except VaultError as e:
        raise click.ClickException(f"{type(e).__name__}: {e}")

    click.echo(f"{amount} {'assets' if direction == 'shares' else 'shares'} -> {result} {direction}")


@cli.command("donation-check")
@click.option("--victim-deposit", type=int, required=True)
@click.option("--donation", type=int, required=True)
@click.option("--attacker-deposit", type=int, default=1)
@click.option("--decimals-offset", type=int, default=settings.VAULT_DECIMALS_OFFSET)
@click.option("--min-initial-deposit", type=int, default=settings.VAULT_MIN_INITIAL_DEPOSIT)
def donation_check(
    victim_deposit: int,
    donation: int,
    attacker_deposit: int,
    decimals_offset: int,
    min_initial_deposit: int,
):
    """Simulate a first-depositor donation attack under a vault policy."""
    result = simulate_donation_attack(
        victim_deposit=victim_deposit,
        donation=donation,
        attacker_deposit=attacker_deposit,
        decimals_offset=decimals_offset,
        min_initial_deposit=min_initial_deposit,
    )
    if result.blocked:
        click.echo("Attack blocked: seed deposit below the minimum initial deposit")
        return

    click.echo(f"Attacker shares: {result.attacker_shares}")
    click.echo(f"Victim shares: {result.victim_shares}")
    click.echo(f"Victim loss: {result.victim_loss}")
    click.echo(f"Attacker profit: {result.attacker_profit}")
    if result.attacker_profit > 0:
        click.echo("Attack profitable")
    else:
        click.echo("Attack unprofitable")


if __name__ == "__main__":
    cli()
