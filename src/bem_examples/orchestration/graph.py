"""Build graph interface and a small in-process orchestrator.

The example pipeline only needs a demand predicate, a registration sink and
an event channel from the build orchestrator. :class:`BuildGraph` is that
narrow interface; :class:`LocalBuildGraph` implements it for the CLI and for
tests, together with the configuration phase in which registered nodes get
the techs that provide or copy their files.
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

from bem_examples.errors import UnsatisfiableTargetError
from bem_examples.utils.file_utils import is_within, normalize_graph_path, path_depth

logger = logging.getLogger("bem_examples.orchestration.graph")

Listener = Callable[..., Any]


class EventChannel:
    """Synchronous publish/subscribe channel."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, name: str, listener: Listener) -> None:
        """Subscribe a listener to an event name."""
        self._listeners[name].append(listener)

    def emit(self, name: str, *args: Any) -> None:
        """Call every listener of ``name`` with ``args``."""
        for listener in list(self._listeners.get(name, [])):
            listener(*args)


@runtime_checkable
class BuildGraph(Protocol):
    """What the example pipeline needs from a build orchestrator."""

    @property
    def root_path(self) -> Path:
        """Absolute project root; graph paths are relative to it."""
        ...

    @property
    def event_channel(self) -> EventChannel:
        """Channel for notifications to downstream consumers."""
        ...

    def get_required_targets(self) -> list[str]:
        """Root-relative paths the current build was asked for."""
        ...

    def is_required_node(self, path: str) -> bool:
        """Whether a node directory is needed by the current build."""
        ...

    def is_required_target(self, path: str) -> bool:
        """Whether a target file is needed by the current build."""
        ...

    def register_node(self, path: str) -> None:
        """Declare a buildable node. Registering twice is a no-op."""
        ...

    def register_target(self, path: str) -> None:
        """Declare a buildable target. Registering twice is a no-op."""
        ...


class Tech:
    """A build step attached to a node that produces one target."""

    target: str
    dependencies: tuple[str, ...] = ()

    async def run(self, node: "NodeConfig") -> Path:
        """Produce the target and return its absolute path."""
        raise NotImplementedError


class NodeConfig:
    """Per-node configuration handed to plugins during the configure phase.

    Target names may use ``?`` for the node basename: in node
    ``set/button/10-simple``, ``?.bemjson.js`` is ``10-simple.bemjson.js``.
    """

    def __init__(self, root: Path, node_path: str):
        self.root = root
        self.node_path = node_path
        self.techs: list[Tech] = []
        self.targets: list[str] = []

    @property
    def basename(self) -> str:
        """Last segment of the node path."""
        return self.node_path.rsplit("/", 1)[-1]

    def expand(self, name: str) -> str:
        """Replace ``?`` with the node basename."""
        return name.replace("?", self.basename)

    def get_node_path(self) -> str:
        """Root-relative node path."""
        return self.node_path

    def resolve_path(self, name: str) -> Path:
        """Absolute path of a file inside the node."""
        return self.root / self.node_path / self.expand(name)

    def target_path(self, name: str) -> str:
        """Root-relative graph path of a target of this node."""
        return f"{self.node_path}/{self.expand(name)}"

    def add_tech(self, tech: Tech) -> None:
        """Attach a tech to this node."""
        self.techs.append(tech)

    def add_techs(self, techs: list[Tech]) -> None:
        """Attach several techs in order."""
        for tech in techs:
            self.add_tech(tech)

    def add_target(self, name: str) -> None:
        """Mark a target of this node as buildable."""
        name = self.expand(name)
        if name not in self.targets:
            self.targets.append(name)

    def _producer(self, target: str) -> Optional[Tech]:
        for tech in reversed(self.techs):
            if self.expand(tech.target) == target:
                return tech
        return None

    async def build_target(self, name: str, _seen: Optional[set[str]] = None) -> Path:
        """Build a target of this node, dependencies first.

        Raises:
            UnsatisfiableTargetError: If no tech produces the target.
        """
        name = self.expand(name)
        seen = _seen if _seen is not None else set()
        if name in seen:
            raise UnsatisfiableTargetError(self.target_path(name), "dependency cycle")
        seen.add(name)

        tech = self._producer(name)
        if tech is None:
            raise UnsatisfiableTargetError(self.target_path(name), "no tech provides it")

        for dependency in tech.dependencies:
            await self.build_target(dependency, seen)
        return await tech.run(self)


ConfigureCallback = Callable[["LocalBuildGraph", list[str]], None]


class LocalBuildGraph:
    """In-process build graph driven by an explicit list of requested targets.

    A path counts as required when it equals a requested path, lies beneath
    one (the request covers it), or lies above one (it is needed to reach it).
    """

    def __init__(
        self,
        root_path: Union[str, Path],
        required_targets: list[str],
        event_channel: Optional[EventChannel] = None,
        level_sets: Optional[list[str]] = None,
    ):
        """Initialize the graph.

        Args:
            root_path: Project root.
            required_targets: Root-relative paths to build.
            event_channel: Channel for notifications; a new one when None.
            level_sets: Destination roots of the configured level-sets. A
                request covering one is satisfied even when the set has no
                examples.
        """
        self._root = Path(root_path).resolve()
        self._required = [normalize_graph_path(target) for target in required_targets]
        self._events = event_channel or EventChannel()
        self._level_sets = [normalize_graph_path(path) for path in level_sets or []]
        self._nodes: set[str] = set()
        self._targets: set[str] = set()
        self._configs: dict[str, NodeConfig] = {}

    @property
    def root_path(self) -> Path:
        return self._root

    @property
    def event_channel(self) -> EventChannel:
        return self._events

    def get_required_targets(self) -> list[str]:
        return list(self._required)

    def _is_required(self, path: str) -> bool:
        path = normalize_graph_path(path)
        return any(
            is_within(path, required) or is_within(required, path)
            for required in self._required
        )

    def is_required_node(self, path: str) -> bool:
        return self._is_required(path)

    def is_required_target(self, path: str) -> bool:
        return self._is_required(path)

    def register_node(self, path: str) -> None:
        path = normalize_graph_path(path)
        if path not in self._nodes:
            logger.debug(f"Registered node {path}")
            self._nodes.add(path)

    def register_target(self, path: str) -> None:
        path = normalize_graph_path(path)
        if path not in self._targets:
            logger.debug(f"Registered target {path}")
            self._targets.add(path)

    @property
    def registered_nodes(self) -> set[str]:
        """Nodes registered directly."""
        return set(self._nodes)

    @property
    def registered_targets(self) -> set[str]:
        """Targets registered so far."""
        return set(self._targets)

    @property
    def nodes(self) -> list[str]:
        """Every known node: registered ones plus the owners of registered targets."""
        nodes = set(self._nodes)
        for target in self._targets:
            if path_depth(target) > 1:
                nodes.add(target.rsplit("/", 1)[0])
        return sorted(nodes)

    def configure(self, callback: ConfigureCallback) -> None:
        """Run a configuration hook with the list of known nodes."""
        callback(self, self.nodes)

    def node_configs(self, nodes: list[str], callback: Callable[[NodeConfig], None]) -> None:
        """Hand the NodeConfig of each node to ``callback``."""
        for node in nodes:
            node = normalize_graph_path(node)
            config = self._configs.get(node)
            if config is None:
                config = self._configs[node] = NodeConfig(self._root, node)
            callback(config)

    def _is_covered(self, required: str, built: list[str]) -> bool:
        if any(is_within(path, required) for path in built):
            return True
        if any(is_within(node, required) for node in self._nodes):
            return True
        if any(is_within(level_set, required) for level_set in self._level_sets):
            return True
        # Nested example levels are copied whole into their registered node
        return (self._root / required).exists() and any(
            is_within(required, node) for node in self._nodes
        )

    async def build(self) -> list[str]:
        """Build every configured target the request covers.

        Returns:
            Root-relative paths of the built targets, sorted.

        Raises:
            UnsatisfiableTargetError: If a requested path is not covered by
                any built target, registered node or level-set root.
        """
        built: list[str] = []

        for node in sorted(self._configs):
            config = self._configs[node]
            for name in config.targets:
                target = config.target_path(name)
                if self.is_required_target(target):
                    await config.build_target(name)
                    built.append(target)

        for required in self._required:
            if not self._is_covered(required, built):
                raise UnsatisfiableTargetError(required)

        logger.info(f"Built {len(built)} targets")
        return sorted(built)


@runtime_checkable
class ConfigurableBuildGraph(BuildGraph, Protocol):
    """A build graph that also runs the configure and build phases."""

    def configure(self, callback: ConfigureCallback) -> None:
        """Run a configuration hook with the list of known nodes."""
        ...

    def node_configs(self, nodes: list[str], callback: Callable[[NodeConfig], None]) -> None:
        """Hand the NodeConfig of each node to ``callback``."""
        ...

    async def build(self) -> list[str]:
        """Build the requested targets."""
        ...
