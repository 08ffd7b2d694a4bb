import httpx

from rs_compactor.clients.http import REMOTE_METHODS, HttpStorageClient
from rs_compactor.core import runner
from rs_compactor.core.runner import auto_craft, craft_item, generate_config, watch
from rs_compactor.models import PatternInfo
from rs_compactor.settings import Settings


def settings_for(tmp_path, config=None):
    if config is None:
        return Settings(config_path=tmp_path / "absent.yml", config_explicit=False)
    return Settings(config_path=config, config_explicit=True)


def test_auto_craft_schedules_affordable_patterns(mixed_network, tmp_path):
    outcome = auto_craft(settings_for(tmp_path), candidates=[mixed_network])
    assert outcome.status == "ok"
    assert [(t.pattern.name, t.quantity) for t in outcome.tasks] == [("minecraft:iron_block", 3)]
    assert outcome.slots_saved == 24
    assert [(i.name, q) for i, q in mixed_network.scheduled] == [("minecraft:iron_block", 3)]


def test_declined_confirmation_schedules_nothing(mixed_network, tmp_path):
    seen = []

    def decline(tasks):
        seen.extend(tasks)
        return False

    outcome = auto_craft(settings_for(tmp_path), confirm=decline, candidates=[mixed_network])
    assert outcome.status == "aborted"
    assert len(seen) == 1
    assert mixed_network.count("schedule_task") == 0


def test_nothing_to_craft(fake_storage, tmp_path):
    outcome = auto_craft(settings_for(tmp_path), candidates=[fake_storage()])
    assert outcome.status == "nothing"
    assert outcome.ok


def test_no_suitable_service(tmp_path):
    outcome = auto_craft(settings_for(tmp_path), candidates=[object()])
    assert outcome.status == "service_not_found"
    assert not outcome.ok


def test_disconnected_service_is_a_clean_exit(fake_storage, tmp_path):
    service = fake_storage(connected=False)
    outcome = auto_craft(settings_for(tmp_path), candidates=[service])
    assert outcome.status == "disconnected"
    assert outcome.ok
    assert "not connected" in outcome.message
    assert service.calls == []


def test_explicit_missing_config_aborts_before_service_calls(mixed_network, tmp_path):
    outcome = auto_craft(settings_for(tmp_path, config=tmp_path / "missing.yml"), candidates=[mixed_network])
    assert outcome.status == "config_error"
    assert mixed_network.calls == []


def test_whitelist_config_restricts_scan(mixed_network, tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("whitelist:\n  - {name: 'minecraft:gold_block', label: Block of Gold, damage: 0}\n",
                    encoding="utf-8")
    outcome = auto_craft(settings_for(tmp_path, config=path), candidates=[mixed_network])
    assert outcome.status == "nothing"
    assert mixed_network.count("list_pattern_identifiers") == 0


def test_schedule_failure_is_reported(fake_storage, uniform_pattern, pattern_info, tmp_path):
    service = fake_storage(
        patterns={
            pattern_info("a:block"): uniform_pattern("a:ingot"),
            pattern_info("b:block"): uniform_pattern("b:ingot"),
        },
        items={("a:ingot", 0): 9, ("b:ingot", 0): 9},
        fail_on={"a:block"},
    )
    outcome = auto_craft(settings_for(tmp_path), candidates=[service])
    assert outcome.status == "schedule_failed"
    assert outcome.submitted == 0
    assert service.count("schedule_task") == 1


def test_generate_config_ignores_existing_whitelist(mixed_network, tmp_path):
    outcome = generate_config(settings_for(tmp_path), candidates=[mixed_network])
    assert outcome.status == "ok"
    assert [i.name for i in outcome.whitelist.whitelist] == [
        "minecraft:iron_block",
        "minecraft:gold_block",
        "minecraft:redstone_block",
    ]
    assert mixed_network.count("schedule_task") == 0


def test_craft_item(mixed_network, tmp_path):
    outcome = craft_item(settings_for(tmp_path), PatternInfo("minecraft:chest"), candidates=[mixed_network])
    assert outcome.status == "ok"
    # 640 planks over an eight-slot recipe
    assert outcome.tasks[0].quantity == 80


def test_snapshot_settings_open_offline_backend(snapshot_file, tmp_path):
    settings = Settings(config_path=tmp_path / "absent.yml", snapshot=snapshot_file)
    outcome = auto_craft(settings)
    assert outcome.status == "ok"
    assert [(t.pattern.name, t.quantity) for t in outcome.tasks] == [("minecraft:iron_block", 3)]


def test_watch_runs_until_max_runs(mixed_network, tmp_path):
    sleeps = []
    outcome = watch(settings_for(tmp_path), interval=5, max_runs=3,
                    candidates=[mixed_network], sleep=sleeps.append)
    assert mixed_network.count("schedule_task") == 3
    assert sleeps == [5, 5]
    assert outcome.status == "ok"


def test_watch_stops_on_fatal_outcome(tmp_path):
    sleeps = []
    outcome = watch(settings_for(tmp_path), interval=5, max_runs=10, candidates=[object()], sleep=sleeps.append)
    assert outcome.status == "service_not_found"
    assert sleeps == []


def test_undecodable_explicit_config_is_a_config_error(mixed_network, tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_bytes(b"whitelist: \xff\n")
    outcome = auto_craft(settings_for(tmp_path, config=path), candidates=[mixed_network])
    assert outcome.status == "config_error"
    assert mixed_network.calls == []


def test_owned_http_clients_are_closed_after_the_run(tmp_path, monkeypatch):
    def handler(request):
        if request.url.path == "/methods":
            return httpx.Response(200, json=list(REMOTE_METHODS))
        return httpx.Response(200, json={"connected": False})

    client = HttpStorageClient("http://bridge.local", transport=httpx.MockTransport(handler))
    monkeypatch.setattr(runner, "open_candidates", lambda settings: [client])
    outcome = auto_craft(settings_for(tmp_path))
    assert outcome.status == "disconnected"
    assert client._client.is_closed
