"""Entry point for the standalone impact agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event, Thread
from typing import Tuple

from ingress_handlers import HandlerRegistry
from ingress_handlers.handlers import build_node_handler
from node_impact.annotations import ReaderAnnotationStore
from node_impact.classifier import TargetModeClassifier
from node_impact.reader import ClusterReader, SnapshotReader
from node_impact.resolver import ImpactResolver
from node_impact.workqueue import DedupingWorkQueue

from .config import AgentConfig, load_config
from .kube import KubernetesReader, load_kube_config
from .watchers import FileClusterWatcher, KubernetesNodeWatcher

LOG = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def build_runtime(
    config: AgentConfig, stop_event: Event
) -> Tuple[DedupingWorkQueue, Thread]:
    """Wire reader, resolver, registry and watcher from ``config``."""

    source = config.source
    default_target_type = config.controller.default_target_type
    reader: ClusterReader
    if source.type == "file":
        reader = SnapshotReader()
        classifier = TargetModeClassifier(
            ReaderAnnotationStore(reader, default_target_type=default_target_type)
        )
    elif source.type == "kubernetes":
        load_kube_config(source.options)
        reader = KubernetesReader()
        # Listed ingresses already carry their annotations.
        classifier = TargetModeClassifier(default_target_type=default_target_type)
    else:
        raise ValueError(f"unsupported source type '{source.type}'")

    queue = DedupingWorkQueue()
    resolver = ImpactResolver(
        config.controller.ingress_class,
        reader,
        classifier,
        queue,
        workers=config.controller.workers,
    )

    registry = HandlerRegistry()
    registry.register("node", build_node_handler(resolver))

    watcher: Thread
    if isinstance(reader, SnapshotReader):
        watcher = FileClusterWatcher(
            registry=registry,
            reader=reader,
            path=source.path,
            interval=source.interval,
            stop_event=stop_event,
        )
        # Perform an initial poll so we react immediately
        try:
            watcher.poll()
        except Exception:  # pragma: no cover - logged inside watcher
            LOG.exception("initial poll failed for snapshot %s", source.path)
    else:
        watcher = KubernetesNodeWatcher(
            registry,
            interval=source.interval,
            stop_event=stop_event,
        )
    return queue, watcher


def drain(queue: DedupingWorkQueue, stop_event: Event, timeout: float = 1.0) -> None:
    """Report reconcile requests until ``stop_event`` is set."""

    while not stop_event.is_set():
        request = queue.get(timeout=timeout)
        if request is None:
            continue
        LOG.info("reconcile requested for ingress %s", request.key)
        queue.done(request)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Enqueue ingresses impacted by node eligibility changes"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/ingress-node-impact/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)
    stop_event = Event()
    queue, watcher = build_runtime(config, stop_event)
    watcher.start()

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        drain(queue, stop_event)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    watcher.join()
    LOG.info("impact agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
