import json

from click.testing import CliRunner

from agent_canvas.cli import main
from agent_canvas.codegen import generate_code
from agent_canvas.models import Graph


def test_cli_generate_basic_template_to_file(tmp_path):
    runner = CliRunner()
    output = tmp_path / "workflow.py"
    result = runner.invoke(main, ["generate", "--template", "basic", "--output", str(output)])
    assert result.exit_code == 0, result.output
    code = output.read_text(encoding="utf-8")
    assert 'Runner.run_sync(Assistant, "Write a haiku about recursion in programming.")' in code


def test_cli_generate_prints_code():
    runner = CliRunner()
    result = runner.invoke(main, ["generate", "--template", "functionTool"])
    assert result.exit_code == 0
    assert "tools=[get_weather]" in result.output
    assert "asyncio.run(main())" in result.output


def test_cli_export_then_generate_round_trip(tmp_path):
    runner = CliRunner()
    exported = runner.invoke(main, ["export-template", "multiAgent"])
    assert exported.exit_code == 0
    graph_path = tmp_path / "graph.json"
    graph_path.write_text(exported.stdout, encoding="utf-8")
    assert json.loads(exported.stdout)["nodes"][0]["type"] == "agent"

    output = tmp_path / "out.py"
    result = runner.invoke(main, ["generate", "--graph", str(graph_path), "--output", str(output)])
    assert result.exit_code == 0, result.output

    graph = Graph.model_validate_json(graph_path.read_text(encoding="utf-8"))
    assert output.read_text(encoding="utf-8") == generate_code(graph.nodes, graph.edges)


def test_cli_generate_save_uses_configured_filename(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AGENT_CANVAS_OUTPUT_FILENAME", "flow.py")
    result = CliRunner().invoke(main, ["generate", "--save"])
    assert result.exit_code == 0, result.output
    assert "Assistant = Agent(" in (tmp_path / "flow.py").read_text(encoding="utf-8")


def test_cli_generate_strict_rejects_dangling_edges(tmp_path):
    graph_path = tmp_path / "broken.json"
    graph_path.write_text(
        json.dumps(
            {
                "nodes": [{"id": "a", "type": "agent", "data": {"name": "Solo"}}],
                "edges": [{"id": "e-bad", "source": "ghost", "target": "a"}],
            }
        ),
        encoding="utf-8",
    )
    runner = CliRunner()
    lenient = runner.invoke(main, ["generate", "--graph", str(graph_path)])
    assert lenient.exit_code == 0
    strict = runner.invoke(main, ["generate", "--graph", str(graph_path), "--strict"])
    assert strict.exit_code == 1
    assert "e-bad" in strict.output


def test_cli_rejects_template_and_graph_together(tmp_path):
    graph_path = tmp_path / "graph.json"
    graph_path.write_text('{"nodes": [], "edges": []}', encoding="utf-8")
    result = CliRunner().invoke(main, ["generate", "--template", "basic", "--graph", str(graph_path)])
    assert result.exit_code == 2


def test_cli_lists_templates():
    result = CliRunner().invoke(main, ["templates"])
    assert result.exit_code == 0
    for key in ("basic", "multiAgent", "functionTool"):
        assert key in result.output


def test_cli_rejects_save_and_output_together(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    output = tmp_path / "explicit.py"
    result = CliRunner().invoke(main, ["generate", "--save", "--output", str(output)])
    assert result.exit_code == 2
    assert not output.exists()
    assert not (tmp_path / "openai_agent_workflow.py").exists()
