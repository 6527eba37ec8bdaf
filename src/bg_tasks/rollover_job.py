import logging

import click
from sqlmodel import Session

from core.config import settings
from core.db import engine, init_db
from core.errors import ProtocolError
from log import setup_logging_to_console, setup_logging_to_file, setup_seq_logging
from services.ledger import Ledger
from services.trader_wallet import TraderWallet
from utils.web3_utils import normalize_address

# # Initialize logger
logger = logging.getLogger("rollover_job")
logger.setLevel(logging.INFO)


def run_rollover(session: Session, wallet_address: str, caller: str) -> TraderWallet:
    ledger = Ledger(session)
    wallet = ledger.get(wallet_address)
    if not isinstance(wallet, TraderWallet):
        raise click.BadParameter(f"{wallet_address} is not a trader wallet", param_hint="--wallet")

    closing_round = wallet.current_round()
    logger.info("Closing round %d of trader wallet %s", closing_round, wallet_address)
    wallet.rollover(caller)
    logger.info(
        "Round %d closed in %s, trader profit %d, vault profit %d",
        closing_round,
        ledger.last_txhash,
        wallet.state().trader_profit,
        wallet.state().vault_profit,
    )
    return wallet


@click.command()
@click.option("--wallet", "wallet_address", required=True, help="Trader wallet address")
@click.option("--caller", required=True, help="Trader address that signs the rollover")
def main(wallet_address: str, caller: str):
    setup_logging_to_file(app="rollover_job", level=logging.INFO, logger=logger)
    setup_logging_to_console(level=logging.INFO, logger=logger)
    setup_seq_logging(level=settings.LOG_LEVEL)

    init_db()
    with Session(engine) as session:
        try:
            run_rollover(session, normalize_address(wallet_address), normalize_address(caller))
        except ProtocolError as e:
            logger.error(
                "Rollover of %s reverted: %s", wallet_address, e.error_message, exc_info=True
            )
            raise SystemExit(1) from e


if __name__ == "__main__":
    main()
