#!/usr/bin/env python3
"""Show which ingresses a node change between two cluster snapshots impacts."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ingress_handlers import HandlerRegistry  # noqa: E402
from ingress_handlers.events import NodeCreated, NodeDeleted, NodeUpdated  # noqa: E402
from ingress_handlers.handlers import build_node_handler  # noqa: E402
from node_impact.annotations import ReaderAnnotationStore  # noqa: E402
from node_impact.classifier import TargetModeClassifier  # noqa: E402
from node_impact.models import TargetMode  # noqa: E402
from node_impact.reader import ClusterSnapshot, SnapshotReader  # noqa: E402
from node_impact.resolver import ImpactResolver  # noqa: E402
from node_impact.workqueue import DedupingWorkQueue  # noqa: E402


LOG = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--before",
        type=Path,
        required=True,
        help="Cluster snapshot (YAML manifests) before the node change",
    )
    parser.add_argument(
        "--after",
        type=Path,
        required=True,
        help="Cluster snapshot (YAML manifests) after the node change",
    )
    parser.add_argument(
        "--ingress-class",
        default="alb",
        help="Ingress class owned by the controller",
    )
    parser.add_argument(
        "--default-target-type",
        default=TargetMode.INSTANCE.value,
        choices=[mode.value for mode in TargetMode],
        help="Target type for ingresses without the target-type annotation",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the impacted ingress keys as a JSON list",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args()


def node_events(before: ClusterSnapshot, after: ClusterSnapshot) -> List[object]:
    events: List[object] = []
    for name, node in after.nodes.items():
        previous = before.nodes.get(name)
        if previous is None:
            events.append(NodeCreated(node))
        elif previous != node:
            events.append(NodeUpdated(previous, node))
    for name in sorted(set(before.nodes) - set(after.nodes)):
        events.append(NodeDeleted(before.nodes[name]))
    return events


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    before = ClusterSnapshot.load(args.before)
    after = ClusterSnapshot.load(args.after)

    reader = SnapshotReader(after)
    queue = DedupingWorkQueue()
    store = ReaderAnnotationStore(
        reader, default_target_type=TargetMode.parse(args.default_target_type)
    )
    resolver = ImpactResolver(
        args.ingress_class, reader, TargetModeClassifier(store), queue
    )
    registry = HandlerRegistry()
    registry.register("node", build_node_handler(resolver))

    events = node_events(before, after)
    if not events:
        LOG.warning("No node changes between %s and %s", args.before, args.after)
    for event in events:
        registry.handle(event)

    impacted = []
    while len(queue):
        request = queue.get(timeout=0)
        impacted.append(request.key)
        queue.done(request)

    if args.json:
        print(json.dumps(sorted(impacted)))
    else:
        for key in sorted(impacted):
            print(key)


if __name__ == "__main__":
    main()
