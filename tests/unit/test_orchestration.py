"""Tests for the orchestration module."""

import logging
from pathlib import Path

import pytest

from bem_examples.config.models import BemExamplesConfig, LevelSetConfig
from bem_examples.errors import ConfigError, UnsatisfiableTargetError
from bem_examples.models.example import ExampleRecord, ExamplesEvent, Placeholder
from bem_examples.models.placeholders import PlaceholderTable
from bem_examples.orchestration.graph import (
    BuildGraph,
    ConfigurableBuildGraph,
    EventChannel,
    LocalBuildGraph,
    NodeConfig,
    Tech,
)
from bem_examples.orchestration.inline import InlineExamplesPlugin
from bem_examples.orchestration.pseudo_levels import PseudoLevelBuilder, PseudoLevelsPlugin
from bem_examples.orchestration.registrar import TargetRegistrar, emit_examples
from bem_examples.orchestration.runner import LevelSetRunner, run_build
from bem_examples.orchestration.techs import FileCopy, FileProvider

DEST = "set.examples"


def recorder(graph: BuildGraph, name: str) -> list[ExamplesEvent]:
    """Collect the events emitted under a name."""
    events: list[ExamplesEvent] = []

    def listener(dest_path: str, examples: list[ExampleRecord]) -> None:
        events.append(ExamplesEvent(destination_root=dest_path, examples=examples))

    graph.event_channel.on(name, listener)
    return events


class TestEventChannel:
    """Tests for EventChannel."""

    def test_emit(self):
        """Test that listeners get the arguments in subscription order."""
        channel = EventChannel()
        calls = []
        channel.on("examples", lambda *args: calls.append(("first", args)))
        channel.on("examples", lambda *args: calls.append(("second", args)))

        channel.emit("examples", 1, 2)
        channel.emit("other", 3)

        assert calls == [("first", (1, 2)), ("second", (1, 2))]


class TestLocalBuildGraph:
    """Tests for LocalBuildGraph."""

    @pytest.fixture
    def graph(self, tmp_path: Path) -> LocalBuildGraph:
        """A graph asked for one example node."""
        return LocalBuildGraph(tmp_path, ["./set/button/10-simple/"])

    def test_protocols(self, graph: LocalBuildGraph):
        """Test that the local graph satisfies both interfaces."""
        assert isinstance(graph, BuildGraph)
        assert isinstance(graph, ConfigurableBuildGraph)

    def test_required_targets_normalized(self, graph: LocalBuildGraph):
        """Test request normalization."""
        assert graph.get_required_targets() == ["set/button/10-simple"]

    def test_required_predicates(self, graph: LocalBuildGraph):
        """Test paths above, at, beneath and beside the request."""
        assert graph.is_required_node("set")
        assert graph.is_required_node("set/button")
        assert graph.is_required_node("set/button/10-simple")
        assert graph.is_required_target("set/button/10-simple/10-simple.bemjson.js")
        assert not graph.is_required_node("set/button/20-other")
        assert not graph.is_required_node("set/button/10-simple-2")
        assert not graph.is_required_target("set/link/10-link/10-link.bemjson.js")

    def test_registration_is_idempotent(self, graph: LocalBuildGraph):
        """Test registering the same paths twice."""
        graph.register_node("set/a/b")
        graph.register_node("set/a/b/")
        graph.register_target("set/a/c/c.js")
        graph.register_target("set/a/c/c.js")

        assert graph.registered_nodes == {"set/a/b"}
        assert graph.registered_targets == {"set/a/c/c.js"}
        assert graph.nodes == ["set/a/b", "set/a/c"]

    @pytest.mark.asyncio
    async def test_unsatisfiable_request(self, graph: LocalBuildGraph):
        """Test a request nothing registered."""
        with pytest.raises(UnsatisfiableTargetError):
            await graph.build()

    @pytest.mark.asyncio
    async def test_empty_level_set_is_satisfied(self, tmp_path: Path):
        """Test a request for a whole level-set that has no examples."""
        graph = LocalBuildGraph(tmp_path, ["set"], level_sets=["./set/"])

        assert await graph.build() == []

        missing = LocalBuildGraph(tmp_path, ["set/button/x"], level_sets=["set"])
        with pytest.raises(UnsatisfiableTargetError):
            await missing.build()

    @pytest.mark.asyncio
    async def test_build_runs_configured_techs(self, tmp_path: Path):
        """Test that configured targets are built and reported."""
        source = tmp_path / "set/button/10-simple/10-simple.bemjson.js"
        source.parent.mkdir(parents=True)
        source.write_text("({})", encoding="utf-8")

        graph = LocalBuildGraph(tmp_path, ["set"])
        graph.register_target("set/button/10-simple/10-simple.bemjson.js")

        def configure(g: LocalBuildGraph, nodes: list[str]) -> None:
            def attach(node: NodeConfig) -> None:
                node.add_tech(FileProvider("?.bemjson.js"))
                node.add_target("?.bemjson.js")
            g.node_configs(nodes, attach)

        graph.configure(configure)

        assert await graph.build() == ["set/button/10-simple/10-simple.bemjson.js"]


class TestNodeConfig:
    """Tests for NodeConfig."""

    def test_paths(self, tmp_path: Path):
        """Test basename expansion."""
        node = NodeConfig(tmp_path, "set/button/10-simple")

        assert node.basename == "10-simple"
        assert node.expand("?.bemjson.js") == "10-simple.bemjson.js"
        assert node.target_path("?.css") == "set/button/10-simple/10-simple.css"
        assert node.resolve_path("?.css") == tmp_path / "set/button/10-simple/10-simple.css"

    @pytest.mark.asyncio
    async def test_missing_producer(self, tmp_path: Path):
        """Test a target no tech produces."""
        node = NodeConfig(tmp_path, "set/button/10-simple")

        with pytest.raises(UnsatisfiableTargetError):
            await node.build_target("?.bemjson.js")

    @pytest.mark.asyncio
    async def test_dependency_cycle(self, tmp_path: Path):
        """Test that a tech depending on its own target fails."""

        class Loop(Tech):
            target = "?.js"
            dependencies = ("?.js",)

            async def run(self, node: NodeConfig) -> Path:
                return node.resolve_path(self.target)

        node = NodeConfig(tmp_path, "set/a/b")
        node.add_tech(Loop())

        with pytest.raises(UnsatisfiableTargetError, match="cycle"):
            await node.build_target("?.js")

    @pytest.mark.asyncio
    async def test_file_provider_on_disk(self, tmp_path: Path):
        """Test a provider without placeholder table."""
        node = NodeConfig(tmp_path, "set/a/b")
        provider = FileProvider("?.js")

        with pytest.raises(UnsatisfiableTargetError):
            await provider.run(node)

        (tmp_path / "set/a/b").mkdir(parents=True)
        (tmp_path / "set/a/b/b.js").write_text("(1)", encoding="utf-8")

        assert await provider.run(node) == tmp_path / "set/a/b/b.js"


class TestPseudoLevelBuilder:
    """Tests for PseudoLevelBuilder."""

    @pytest.fixture
    def builder(self, levels: list[Path]) -> PseudoLevelBuilder:
        """Builder over the sample levels."""
        return PseudoLevelBuilder(DEST, levels, ["examples"], ["bemjson.js"])

    def test_canonical_depth(self, builder: PseudoLevelBuilder):
        """Test the depth of an example node."""
        assert builder.canonical_depth == 3

    def test_collect(self, builder: PseudoLevelBuilder, project_root: Path):
        """Test the mapping of tech folder children."""
        table = builder.collect()

        assert [(p.destination, p.is_dir) for p in table] == [
            (f"{DEST}/button/10-simple/10-simple.bemjson.js", False),
            (f"{DEST}/button/20-nested/blocks", True),
            (f"{DEST}/link/10-link/10-link.bemjson.js", False),
            (f"{DEST}/button/30-desktop/30-desktop.bemjson.js", False),
        ]

    def test_earlier_level_shadows(self, builder: PseudoLevelBuilder, project_root: Path):
        """Test that the first level provides a shared destination."""
        table = builder.collect()
        source = table.get(f"{DEST}/button/10-simple/10-simple.bemjson.js").source

        assert source == project_root / "blocks/button/button.examples/10-simple.bemjson.js"

    def test_ignores_unknown_files(self, builder: PseudoLevelBuilder, project_root: Path, write_file):
        """Test files without a configured suffix."""
        write_file(project_root, "blocks/button/button.examples/README.txt", "notes")
        write_file(project_root, "blocks/button/button.examples/plain/file.txt", "notes")

        destinations = [p.destination for p in builder.collect()]

        assert not any("README" in d or "plain" in d for d in destinations)

    def test_resolve_whole_set(self, builder: PseudoLevelBuilder):
        """Test a request for the destination root."""
        assert len(builder.resolve([DEST])) == 4

    def test_resolve_entity(self, builder: PseudoLevelBuilder):
        """Test a request for one entity."""
        table = builder.resolve([f"{DEST}/button"])

        assert [p.destination for p in table] == [
            f"{DEST}/button/10-simple/10-simple.bemjson.js",
            f"{DEST}/button/20-nested/blocks",
            f"{DEST}/button/30-desktop/30-desktop.bemjson.js",
        ]

    def test_resolve_single_file(self, builder: PseudoLevelBuilder):
        """Test that a file request resolves only that file."""
        target = f"{DEST}/link/10-link/10-link.bemjson.js"
        assert [p.destination for p in builder.resolve([target])] == [target]

    def test_resolve_inside_nested_level(self, builder: PseudoLevelBuilder, project_root: Path):
        """Test a request for a file inside a nested example level."""
        target = f"{DEST}/button/20-nested/blocks/button/button.css"
        table = builder.resolve([target])

        placeholder = table.get(target)
        assert placeholder.source == (
            project_root / "blocks/button/button.examples/20-nested.blocks/button/button.css"
        )
        assert len(table) == 1

    def test_resolve_nothing_requested(self, builder: PseudoLevelBuilder):
        """Test requests outside the set."""
        assert len(builder.resolve(["other.examples", "blocks"])) == 0
        assert len(builder.resolve([f"{DEST}/button/99-missing/99-missing.bemjson.js"])) == 0

    def test_resolve_fills_given_table(self, builder: PseudoLevelBuilder):
        """Test resolution into a shared table."""
        table = PlaceholderTable()
        assert builder.resolve([f"{DEST}/link"], table) is table
        assert len(table) == 1


class TestTargetRegistrar:
    """Tests for TargetRegistrar."""

    @pytest.fixture
    def table(self, levels: list[Path]) -> PlaceholderTable:
        """All placeholders of the sample project."""
        return PseudoLevelBuilder(DEST, levels, ["examples"], ["bemjson.js"]).collect()

    def test_registers_required_only(self, project_root: Path, table: PlaceholderTable):
        """Test that unrequired examples are not registered."""
        graph = LocalBuildGraph(project_root, [f"{DEST}/button/10-simple"])

        examples = TargetRegistrar(graph, DEST, ["bemjson.js"]).register(table)

        assert [example.name for example in examples] == ["10-simple"]
        assert graph.registered_targets == {f"{DEST}/button/10-simple/10-simple.bemjson.js"}
        assert graph.registered_nodes == set()

    def test_node_without_files(self, project_root: Path, table: PlaceholderTable):
        """Test that an example with no output file registers as a node."""
        graph = LocalBuildGraph(project_root, [DEST])

        examples = TargetRegistrar(graph, DEST, ["bemjson.js"]).register(table)

        assert [example.name for example in examples] == ["10-simple", "20-nested", "10-link", "30-desktop"]
        assert graph.registered_nodes == {f"{DEST}/button/20-nested"}
        assert len(graph.registered_targets) == 3

    def test_no_file_suffixes(self, project_root: Path, table: PlaceholderTable):
        """Test that every example is a node when no per-file outputs exist."""
        graph = LocalBuildGraph(project_root, [DEST])

        TargetRegistrar(graph, DEST, []).register(table)

        assert len(graph.registered_nodes) == 4
        assert graph.registered_targets == set()

    def test_records(self, project_root: Path, table: PlaceholderTable):
        """Test the produced example records."""
        graph = LocalBuildGraph(project_root, [f"{DEST}/link"])

        (example,) = TargetRegistrar(graph, DEST, ["bemjson.js"]).register(table)

        assert example.to_payload() == {
            "name": "10-link",
            "path": f"{DEST}/link/10-link",
            "notation": {"block": "link"},
        }

    def test_emit_examples(self, project_root: Path):
        """Test the notification payload."""
        graph = LocalBuildGraph(project_root, [DEST])
        events = recorder(graph, "examples")

        event = emit_examples(graph, "examples", DEST, [])

        assert events == [event]
        assert event.to_payload() == {"destinationRoot": DEST, "examples": []}

    def test_emit_examples_arguments(self, project_root: Path):
        """Test that listeners get the destination and the examples as two arguments."""
        graph = LocalBuildGraph(project_root, [DEST])
        calls = []
        graph.event_channel.on("examples", lambda *args: calls.append(args))
        record = ExampleRecord(name="10-link", path=f"{DEST}/link/10-link")

        emit_examples(graph, "examples", DEST, [record])

        assert calls == [(DEST, [record])]


class TestPseudoLevelsPlugin:
    """Tests for PseudoLevelsPlugin."""

    @pytest.fixture
    def config(self) -> LevelSetConfig:
        """Pseudo-level only config."""
        return LevelSetConfig(destPath=DEST, levels=["blocks", "desktop.blocks"], inline=False)

    @pytest.mark.asyncio
    async def test_event_emitted_once(self, project_root: Path, config: LevelSetConfig):
        """Test a single event per pass, even when empty."""
        graph = LocalBuildGraph(project_root, ["elsewhere"])
        events = recorder(graph, PseudoLevelsPlugin.EVENT)

        await PseudoLevelsPlugin(config, project_root, PlaceholderTable()).prebuild(graph)

        assert len(events) == 1
        assert events[0].examples == []

    @pytest.mark.asyncio
    async def test_prebuild_copies_nested_levels(self, project_root: Path, config: LevelSetConfig):
        """Test that nested levels are real directories after prebuild."""
        graph = LocalBuildGraph(project_root, [f"{DEST}/button"])

        event = await PseudoLevelsPlugin(config, project_root, PlaceholderTable()).prebuild(graph)

        assert event.names == ["10-simple", "20-nested", "30-desktop"]
        assert (project_root / DEST / "button/20-nested/blocks/button/button.css").is_file()
        # Files are only copied by the build
        assert not (project_root / DEST / "button/10-simple/10-simple.bemjson.js").exists()

    @pytest.mark.asyncio
    async def test_placeholders_reset_each_pass(self, project_root: Path, config: LevelSetConfig):
        """Test that a pass does not reuse the previous pass's placeholders."""
        table = PlaceholderTable()
        plugin = PseudoLevelsPlugin(config, project_root, table)

        await plugin.prebuild(LocalBuildGraph(project_root, [DEST]))
        assert len(table) == 4

        await plugin.prebuild(LocalBuildGraph(project_root, [f"{DEST}/link"]))
        assert len(table) == 1


class TestInlineExamplesPlugin:
    """Tests for InlineExamplesPlugin."""

    @pytest.fixture
    def meta_calls(self) -> list:
        """Arguments the transform was called with."""
        return []

    @pytest.fixture
    def config(self, meta_calls: list) -> LevelSetConfig:
        """Inline only config with a recording transform."""

        def transform(value, meta):
            meta_calls.append((value, meta))
            return value

        return LevelSetConfig(
            destPath=DEST,
            levels=["blocks", "desktop.blocks"],
            pseudoLevels=False,
            processInlineBemjson=transform,
        )

    @pytest.mark.asyncio
    async def test_button_scenario(
        self,
        project_root: Path,
        config: LevelSetConfig,
        meta_calls: list,
        button_identity: str,
    ):
        """Test one fragment in button.md from extraction to notification."""
        graph = LocalBuildGraph(project_root, [DEST])
        events = recorder(graph, InlineExamplesPlugin.EVENT)

        await InlineExamplesPlugin(config, project_root).prebuild(graph)

        target = f"{DEST}/button/{button_identity}/{button_identity}.bemjson.js"
        artifact = project_root / target

        assert artifact.read_text(encoding="utf-8") == '({"block":"button","text":"Click me!"})'
        assert meta_calls == [
            (
                {"block": "button", "text": "Click me!"},
                {"filename": str(artifact), "notation": {"block": "button"}},
            )
        ]
        assert graph.registered_targets == {target}
        assert len(events) == 1
        assert events[0].to_payload() == {
            "destinationRoot": DEST,
            "examples": [
                {
                    "name": button_identity,
                    "path": f"{DEST}/button/{button_identity}",
                    "notation": {"block": "button"},
                }
            ],
        }

    @pytest.mark.asyncio
    async def test_failure_isolation(self, project_root: Path, config: LevelSetConfig, write_file, caplog):
        """Test that a bad fragment is dropped with a warning."""
        write_file(
            project_root,
            "blocks/card/card.md",
            "```bemjson\n({ block: 'card' })\n```\n\n```bemjson\n({ block: card })\n```\n",
        )
        graph = LocalBuildGraph(project_root, [f"{DEST}/card"])
        plugin = InlineExamplesPlugin(config, project_root)

        with caplog.at_level(logging.WARNING):
            event = await plugin.prebuild(graph)

        assert len(event.examples) == 1
        assert len(plugin.failures) == 1
        assert plugin.failures[0].name == "ReferenceError"
        assert "[inline-bemjson] blocks/card/card.md: ReferenceError: card is not defined" in caplog.text
        assert len(list((project_root / DEST / "card").iterdir())) == 1

    @pytest.mark.asyncio
    async def test_number_beyond_float_range(self, project_root: Path, config: LevelSetConfig, write_file):
        """Test that a huge integer literal does not stop the other fragments."""
        huge = "1" + "0" * 400
        write_file(
            project_root,
            "blocks/card/card.md",
            f"```bemjson\n({{ block: 'card' }})\n```\n\n```bemjson\n({{ block: 'card', size: {huge} / 1 }})\n```\n",
        )
        graph = LocalBuildGraph(project_root, [f"{DEST}/card"])
        plugin = InlineExamplesPlugin(config, project_root)

        event = await plugin.prebuild(graph)

        assert len(event.examples) == 2
        assert plugin.failures == []
        artifacts = {
            path.read_text(encoding="utf-8") for path in (project_root / DEST / "card").rglob("*.bemjson.js")
        }
        assert artifacts == {'({"block":"card"})', '({"block":"card","size":null})'}

    @pytest.mark.asyncio
    async def test_folder_example_claims_node(
        self,
        project_root: Path,
        config: LevelSetConfig,
        write_file,
        button_identity: str,
    ):
        """Test that a fragment whose node is held by a folder example is not written."""
        target = f"{DEST}/button/{button_identity}/{button_identity}.bemjson.js"
        placeholders = PlaceholderTable()
        placeholders.add(Placeholder(destination=target, source=project_root / "folder.bemjson.js"))
        graph = LocalBuildGraph(project_root, [DEST])

        event = await InlineExamplesPlugin(config, project_root, placeholders=placeholders).prebuild(graph)

        assert event.examples == []
        assert not (project_root / target).exists()

    @pytest.mark.asyncio
    async def test_duplicates_collapse(self, project_root: Path, config: LevelSetConfig, write_file, button_fragment: str):
        """Test that identical fragments in several levels make one example."""
        doc = f"```bemjson\n{button_fragment}\n```\n\n```bemjson\n{button_fragment}\n```\n"
        write_file(project_root, "desktop.blocks/button/button.md", doc)
        graph = LocalBuildGraph(project_root, [DEST])

        event = await InlineExamplesPlugin(config, project_root).prebuild(graph)

        assert len(event.examples) == 1

    @pytest.mark.asyncio
    async def test_unrequired_fragments_skipped(self, project_root: Path, config: LevelSetConfig, meta_calls: list):
        """Test that nothing is evaluated or written outside the request."""
        graph = LocalBuildGraph(project_root, [f"{DEST}/link"])

        event = await InlineExamplesPlugin(config, project_root).prebuild(graph)

        assert event.examples == []
        assert meta_calls == []
        assert not (project_root / DEST).exists()

    @pytest.mark.asyncio
    async def test_undecodable_document(self, project_root: Path, config: LevelSetConfig, caplog):
        """Test that a binary document is skipped with a warning."""
        bad = project_root / "blocks/icon/icon.md"
        bad.parent.mkdir(parents=True)
        bad.write_bytes(b"\xff\xfe```bemjson\n({})\n```")
        graph = LocalBuildGraph(project_root, [DEST])

        with caplog.at_level(logging.WARNING):
            event = await InlineExamplesPlugin(config, project_root).prebuild(graph)

        assert len(event.examples) == 1
        assert "[inline-bemjson] blocks/icon/icon.md" in caplog.text

    @pytest.mark.asyncio
    async def test_non_entity_document_skipped(self, project_root: Path, config: LevelSetConfig, write_file):
        """Test a document whose name is not BEM notation."""
        write_file(project_root, "blocks/release notes.md", "```bemjson\n({ block: 'x' })\n```\n")
        graph = LocalBuildGraph(project_root, [DEST])

        event = await InlineExamplesPlugin(config, project_root).prebuild(graph)

        assert len(event.examples) == 1

    @pytest.mark.asyncio
    async def test_transform_errors_are_fatal(self, project_root: Path):
        """Test that a failing transform stops the pass."""

        def transform(value, meta):
            raise ValueError("broken transform")

        config = LevelSetConfig(destPath=DEST, levels=["blocks"], processInlineBemjson=transform)
        graph = LocalBuildGraph(project_root, [DEST])

        with pytest.raises(ValueError, match="broken transform"):
            await InlineExamplesPlugin(config, project_root).prebuild(graph)


class TestLevelSetRunner:
    """Tests for LevelSetRunner and run_build."""

    @pytest.fixture
    def config(self, project_root: Path, set_config: LevelSetConfig) -> BemExamplesConfig:
        """Config for the sample project."""
        return BemExamplesConfig(rootPath=project_root, sets=[set_config])

    @pytest.mark.asyncio
    async def test_full_pass(self, project_root: Path, config: BemExamplesConfig, button_identity: str):
        """Test a build of the whole level-set."""
        summary = await run_build(config)

        assert summary.events["examples"][0].names == ["10-simple", "20-nested", "10-link", "30-desktop"]
        assert summary.events["inline-examples"][0].names == [button_identity]
        assert summary.built_targets == sorted(
            [
                f"{DEST}/button/10-simple/10-simple.bemjson.js",
                f"{DEST}/button/30-desktop/30-desktop.bemjson.js",
                f"{DEST}/button/{button_identity}/{button_identity}.bemjson.js",
                f"{DEST}/link/10-link/10-link.bemjson.js",
            ]
        )
        assert summary.failures == []

        out = project_root / DEST
        assert (out / "button/10-simple/10-simple.bemjson.js").read_bytes() == (
            project_root / "blocks/button/button.examples/10-simple.bemjson.js"
        ).read_bytes()
        assert (out / "button/30-desktop/30-desktop.bemjson.js").read_text(encoding="utf-8") == (
            "({ block: 'button', mods: { size: 'l' } })"
        )
        assert (out / "button/20-nested/blocks/button/button.css").is_file()

    @pytest.mark.asyncio
    async def test_demand_driven(self, project_root: Path, config: BemExamplesConfig):
        """Test that only the requested entity is materialized."""
        summary = await run_build(config, [f"{DEST}/link"])

        assert summary.built_targets == [f"{DEST}/link/10-link/10-link.bemjson.js"]
        assert summary.events["inline-examples"][0].examples == []
        assert not (project_root / DEST / "button").exists()

    @pytest.mark.asyncio
    async def test_nested_level_file(self, project_root: Path, config: BemExamplesConfig):
        """Test a request for a file inside a nested example level."""
        target = f"{DEST}/button/20-nested/blocks/button/button.css"

        summary = await run_build(config, [target])

        assert summary.events["examples"][0].names == ["20-nested"]
        assert (project_root / target).read_text(encoding="utf-8") == ".button { color: red; }"

    @pytest.mark.asyncio
    async def test_folder_example_wins_over_inline(
        self,
        project_root: Path,
        config: BemExamplesConfig,
        write_file,
        button_identity: str,
    ):
        """Test a folder example named like the identity of an inline fragment."""
        source = write_file(
            project_root,
            f"blocks/button/button.examples/{button_identity}.bemjson.js",
            "({ block: 'button', text: 'From folder' })",
        )
        node = f"{DEST}/button/{button_identity}"
        graph = LocalBuildGraph(project_root, [DEST])

        summary = await LevelSetRunner(config, graph).run()

        configs: list[NodeConfig] = []
        graph.node_configs([node], configs.append)
        techs = configs[0].techs
        assert [type(tech) for tech in techs] == [FileProvider, FileCopy]
        assert techs[0].target == "?.bemjson.js.placeholder"
        assert (project_root / node / f"{button_identity}.bemjson.js").read_bytes() == source.read_bytes()
        assert button_identity in summary.events["examples"][0].names
        assert summary.events["inline-examples"][0].examples == []

    @pytest.mark.asyncio
    async def test_empty_level_set(self, tmp_path: Path, write_file):
        """Test a default build of levels that hold no examples."""
        write_file(tmp_path, "blocks/button/button.md", "")
        config = BemExamplesConfig(
            rootPath=tmp_path,
            sets=[LevelSetConfig(destPath=DEST, levels=["blocks"])],
        )

        summary = await run_build(config)

        assert summary.built_targets == []
        assert summary.events["examples"][0].examples == []
        assert summary.events["inline-examples"][0].examples == []

    @pytest.mark.asyncio
    async def test_unsatisfiable(self, config: BemExamplesConfig):
        """Test a request for an example that does not exist."""
        with pytest.raises(UnsatisfiableTargetError):
            await run_build(config, [f"{DEST}/button/99-missing/99-missing.bemjson.js"])

    @pytest.mark.asyncio
    async def test_second_pass_is_stable(self, project_root: Path, config: BemExamplesConfig):
        """Test that rebuilding gives the same targets and bytes."""
        first = await run_build(config)
        snapshot = {
            path: path.read_bytes() for path in (project_root / DEST).rglob("*") if path.is_file()
        }

        second = await run_build(config)

        assert second.built_targets == first.built_targets
        assert {
            path: path.read_bytes() for path in (project_root / DEST).rglob("*") if path.is_file()
        } == snapshot

    def test_plugins_per_set(self, project_root: Path, set_config: LevelSetConfig):
        """Test plugin wiring from the set switches."""
        inline_only = set_config.model_copy(update={"pseudo_levels": False})
        config = BemExamplesConfig(rootPath=project_root, sets=[set_config, inline_only])

        runner = LevelSetRunner(config, LocalBuildGraph(project_root, [DEST]))

        assert [type(plugin) for plugin in runner.plugins] == [
            PseudoLevelsPlugin,
            InlineExamplesPlugin,
            InlineExamplesPlugin,
        ]

    @pytest.mark.asyncio
    async def test_no_sets(self, project_root: Path):
        """Test that an empty configuration is rejected."""
        with pytest.raises(ConfigError):
            await run_build(BemExamplesConfig(rootPath=project_root))
