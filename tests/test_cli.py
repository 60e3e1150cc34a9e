"""Tests for the command line interface."""

import json

import pytest

from printwatch import cli
from printwatch.counters import default_counter_oids
from printwatch.discovery.engine import DiscoveryEngine
from printwatch.errors import OidParseError, StorageAction, StorageError, SnmpTimeoutError
from printwatch.models import PrinterRecord, PrinterStatus
from printwatch.snmp.oid import Oid


def parse(*argv):
    return cli.create_parser().parse_args(list(argv))


class TestParser:

    def test_discover_defaults(self):
        args = parse("discover")
        assert args.command == "discover"
        assert args.cidr is None
        assert args.community is None
        assert args.concurrency is None
        assert not args.no_color

    def test_walk_args(self):
        args = parse("walk", "10.0.0.5", "1.3.6.1.2.1.43", "--max-results", "50", "-c", "office")
        assert args.host == "10.0.0.5"
        assert args.root == "1.3.6.1.2.1.43"
        assert args.max_results == 50
        assert args.community == "office"

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestBuildConfig:

    def test_flags_override_file(self, tmp_path):
        path = tmp_path / "printwatch.yaml"
        path.write_text("snmp:\n  community: office\n  retries: 3\n  port: 1161\n")

        args = parse("discover", "--config", str(path), "-c", "lab", "-t", "0.5", "--concurrency", "4")
        config = cli.build_config(args)

        assert config.snmp.community == "lab"
        assert config.snmp.timeout == 0.5
        assert config.snmp.retries == 3
        assert config.snmp.port == 1161
        assert config.discovery.concurrency == 4

    def test_no_file(self):
        config = cli.build_config(parse("probe", "10.0.0.5", "-r", "0"))
        assert config.snmp.retries == 0
        assert config.snmp.community == "public"


class TestCounterOidArgs:

    def test_defaults(self):
        args = parse("poll", "10.0.0.5")
        assert cli.counter_oids_from_args(args).to_dict() == default_counter_oids().to_dict()

    def test_mapping_file_then_flag_override(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"bw": ["1.3.6.1.4.1.999.1"], "total": ["1.3.6.1.4.1.999.3"]}))

        args = parse("poll", "10.0.0.5", "--mapping", str(path), "--total", "1.3.6.1.4.1.999.4, .1.3.6.1.4.1.999.5")
        mapping = cli.counter_oids_from_args(args)

        assert mapping.bw == [Oid.parse("1.3.6.1.4.1.999.1")]
        assert mapping.color == []
        assert mapping.total == [Oid.parse("1.3.6.1.4.1.999.4"), Oid.parse("1.3.6.1.4.1.999.5")]

    def test_bad_mapping_file(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("{not json")

        with pytest.raises(StorageError) as exc_info:
            cli.load_mapping(path)

        assert exc_info.value.action == StorageAction.LOAD

    def test_bad_oid_flag(self):
        with pytest.raises(OidParseError):
            cli.counter_oids_from_args(parse("poll", "10.0.0.5", "--bw", "1.3.x"))


class TestOutput:

    def test_write_output(self, tmp_path, capsys):
        path = tmp_path / "out.json"
        cli.write_output(path, {"a": 1})

        assert json.loads(path.read_text()) == {"a": 1}
        assert "Saved to" in capsys.readouterr().out

    def test_write_output_failure(self, tmp_path):
        with pytest.raises(StorageError) as exc_info:
            cli.write_output(tmp_path, {"a": 1})

        assert exc_info.value.action == StorageAction.SAVE


class TestCommands:

    def test_identify(self, tmp_path, capsys):
        path = tmp_path / "profile.json"

        code = cli.main(["identify", "--sys-descr", "RICOH IM C3000", "-o", str(path)])

        out = capsys.readouterr().out
        assert code == 0
        assert "known" in out
        assert "bw_color_preferred" in out
        assert json.loads(path.read_text())["model"] == "IM C3000"

    def test_error_becomes_exit_status(self, capsys):
        """Should print the short summary and return 1 on a PrintwatchError."""
        code = cli.main(["poll", "10.0.0.5", "--bw", "1.3.x"])

        assert code == 1
        assert "ERROR:" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path, capsys):
        code = cli.main(["probe", "10.0.0.5", "--config", str(tmp_path / "nope.yaml")])

        assert code == 1
        assert "Failed to load data." in capsys.readouterr().out

    def test_probe_not_a_printer(self, monkeypatch, capsys):
        async def fake_probe(address, community=None, config=None, client=None):
            return None

        monkeypatch.setattr(cli, "probe_printer", fake_probe)

        assert cli.main(["probe", "10.0.0.5"]) == 1
        assert "not a printer" in capsys.readouterr().out

    def test_probe_printer(self, monkeypatch, capsys):
        async def fake_probe(address, community=None, config=None, client=None):
            return PrinterRecord(
                printer_id=f"snmp-{address.host}",
                host=address.host,
                model="RICOH IM C3000",
                snmp_address=address,
                status=PrinterStatus.ONLINE,
            )

        monkeypatch.setattr(cli, "probe_printer", fake_probe)

        assert cli.main(["probe", "10.0.0.5", "-p", "1161"]) == 0
        out = capsys.readouterr().out
        assert "snmp-10.0.0.5" in out
        assert "RICOH IM C3000" in out


class TestDiscoverCommand:

    @staticmethod
    def patch_engine(monkeypatch, probe):
        def make_engine(*args, **kwargs):
            return DiscoveryEngine(*args, probe=probe, **kwargs)

        monkeypatch.setattr(cli, "DiscoveryEngine", make_engine)

    def test_lists_printers(self, monkeypatch, tmp_path, capsys):
        async def probe(address, community=None, config=None, client=None):
            if address.host == "10.0.0.1":
                return PrinterRecord(
                    printer_id="snmp-10.0.0.1",
                    host="10.0.0.1",
                    model="RICOH MP C3004",
                    snmp_address=address,
                )
            return None

        self.patch_engine(monkeypatch, probe)
        path = tmp_path / "run.json"

        code = cli.main(["discover", "10.0.0.0/30", "--no-color", "-o", str(path)])

        assert code == 0
        assert "RICOH MP C3004" in capsys.readouterr().out
        data = json.loads(path.read_text())
        assert data["host_count"] == 2
        assert data["printers"][0]["printer_id"] == "snmp-10.0.0.1"

    def test_all_hosts_failed(self, monkeypatch, capsys):
        async def probe(address, community=None, config=None, client=None):
            raise SnmpTimeoutError(str(address), 500)

        self.patch_engine(monkeypatch, probe)

        code = cli.main(["discover", "10.0.0.0/30", "--no-color"])

        assert code == 1
        assert "Discovery failed for 10.0.0.0/30." in capsys.readouterr().out

    def test_bad_range(self, capsys):
        assert cli.main(["discover", "10.0.0.0", "--no-color"]) == 1
        assert "Invalid range" in capsys.readouterr().out
