from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from bg_tasks import rollover_job
from conftest import e18


def test_run_rollover_closes_the_round(deployment, db_session):
    d = deployment
    d.fund(d.users[0], e18(100))
    d.vault.user_deposit(d.users[0], e18(100))

    wallet = rollover_job.run_rollover(db_session, d.wallet.address, d.trader)

    assert wallet.current_round() == 1
    assert d.vault.current_round() == 1
    assert d.vault.preview_shares(d.users[0]) == e18(100)


def test_run_rollover_rejects_other_contracts(deployment, db_session):
    d = deployment

    with pytest.raises(click.BadParameter):
        rollover_job.run_rollover(db_session, d.vault.address, d.trader)
    with pytest.raises(click.BadParameter):
        rollover_job.run_rollover(db_session, d.ledger.new_address(), d.trader)


@patch("bg_tasks.rollover_job.setup_seq_logging")
@patch("bg_tasks.rollover_job.setup_logging_to_file")
@patch("bg_tasks.rollover_job.init_db")
def test_main_rolls_the_wallet_over(mock_init_db, mock_file_logging, mock_seq_logging, deployment, db_engine):
    d = deployment
    d.fund(d.users[0], e18(100))
    d.vault.user_deposit(d.users[0], e18(100))

    with patch("bg_tasks.rollover_job.engine", db_engine):
        result = CliRunner().invoke(rollover_job.main, ["--wallet", d.wallet.address, "--caller", d.trader])

    assert result.exit_code == 0
    mock_init_db.assert_called_once()
    assert d.wallet.current_round() == 1


@patch("bg_tasks.rollover_job.setup_seq_logging")
@patch("bg_tasks.rollover_job.setup_logging_to_file")
@patch("bg_tasks.rollover_job.init_db")
def test_main_exits_on_revert(mock_init_db, mock_file_logging, mock_seq_logging, deployment, db_engine):
    d = deployment

    # nothing to roll over in an empty round
    with patch("bg_tasks.rollover_job.engine", db_engine):
        result = CliRunner().invoke(rollover_job.main, ["--wallet", d.wallet.address, "--caller", d.trader])

    assert result.exit_code == 1
    assert d.wallet.current_round() == 0
