"""oslo.config options for embedding the resolver in a host service.

Services configured through oslo.config register these options and build
the resolver settings from them instead of reading the standalone YAML file.
"""

from oslo_config import cfg

from node_impact.classes import DEFAULT_INGRESS_CLASS
from node_impact.models import TargetMode

from .config import ControllerConfig

impact_opts = [
    cfg.StrOpt('ingress_class',
               default=DEFAULT_INGRESS_CLASS,
               help='Ingress class owned by this controller. An empty value '
                    'also claims ingresses without a class.'),
    cfg.IntOpt('impact_workers',
               default=1,
               min=1,
               help='Maximum number of ingresses evaluated concurrently '
                    'when a node eligibility change is observed.'),
    cfg.StrOpt('default_target_type',
               default=TargetMode.INSTANCE.value,
               choices=[mode.value for mode in TargetMode],
               help='Target type assumed for ingresses without the '
                    'alb.ingress.kubernetes.io/target-type annotation.'),
]


def register_impact_opts(conf=None):
    """Register the impact options on ``conf`` (``cfg.CONF`` by default).

    Options land in the DEFAULT group next to the host service's own.
    """
    conf = cfg.CONF if conf is None else conf
    conf.register_opts(impact_opts)
    return conf


def controller_config_from_conf(conf):
    """Build a :class:`ControllerConfig` from registered options."""
    return ControllerConfig(
        ingress_class=conf.ingress_class or '',
        workers=conf.impact_workers,
        default_target_type=TargetMode.parse(conf.default_target_type),
    )
