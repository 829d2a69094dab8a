import os

import pytest

from finprov.cli import init_home, main
from finprov.config import (
    cfg_file,
    data_dir,
    default_config_with_home,
    load_config,
    log_dir,
)


def test_init_home_creates_loadable_config(tmp_path):
    home = init_home(str(tmp_path / "home"))
    assert home == str(tmp_path / "home")
    assert os.path.isdir(log_dir(home))
    assert os.path.isfile(cfg_file(home))

    cfg = load_config(home)
    expected = default_config_with_home(home)
    assert cfg.chain_type == "babylon"
    assert cfg.babylon_config.key == "finality-provider"
    assert cfg.babylon_config == expected.babylon_config
    assert cfg.poller_config == expected.poller_config
    assert cfg.database_config == expected.database_config
    assert cfg.database_config.db_path == data_dir(home)
    assert cfg.rpc_listener == expected.rpc_listener
    assert cfg.randomness_commit_interval == expected.randomness_commit_interval


def test_init_home_refuses_existing_directory(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    with pytest.raises(FileExistsError, match="already exists"):
        init_home(str(home))
    assert not os.path.exists(cfg_file(str(home)))


def test_init_home_force_overwrites(tmp_path):
    home = str(tmp_path / "home")
    init_home(home)
    with open(cfg_file(home), "w", encoding="utf-8") as handle:
        handle.write("garbage without equals\n")
    init_home(home, force=True)
    assert load_config(home).num_pub_rand == default_config_with_home(home).num_pub_rand


def test_main_init_creates_home(tmp_path):
    home = str(tmp_path / "fpdhome")
    assert main(["init", "--home", home]) == 0
    assert load_config(home).bitcoin_network == "signet"


def test_main_home_before_subcommand(tmp_path):
    home = str(tmp_path / "fpdhome")
    assert main(["--home", home, "init"]) == 0
    assert os.path.isfile(cfg_file(home))


def test_main_init_twice_fails(tmp_path, capsys):
    home = str(tmp_path / "fpdhome")
    assert main(["init", "--home", home]) == 0
    assert main(["init", "--home", home]) == 1
    err = capsys.readouterr().err
    assert "Whoops. There was an error while executing your fpd CLI" in err
    assert "already exists" in err


def test_main_init_force_succeeds_on_existing(tmp_path):
    home = str(tmp_path / "fpdhome")
    assert main(["init", "--home", home]) == 0
    assert main(["init", "--home", home, "--force"]) == 0


def test_main_without_command_prints_help(capsys):
    assert main([]) == 0
    assert "fpd" in capsys.readouterr().out