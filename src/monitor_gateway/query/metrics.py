"""
monitor_gateway.query.metrics

CloudWatch metric catalogue for instance metrics.

Responsibilities:
- The closed set of metric names a query may ask for.
- Namespace/dimension per instance kind and the fixed statistics window.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from monitor_gateway.backends.aws import Instance, MetricQuery
from monitor_gateway.errors import UnknownInstanceMetricTypeError, UnknownMetricError

METRIC_WINDOW = timedelta(hours=1)
METRIC_PERIOD_SECONDS = 60
# CloudWatch lags; the newest minute is usually empty.
METRIC_LAG = timedelta(minutes=1)
METRIC_STATISTIC = "Average"

INSTANCE_METRIC_DIMENSIONS: dict[str, tuple[str, str]] = {
    "ec2": ("AWS/EC2", "InstanceId"),
    "rds": ("AWS/RDS", "DBInstanceIdentifier"),
}

METRIC_NAMES: frozenset[str] = frozenset(
    {
        "ApproximateNumberOfMessagesDelayed",
        "ApproximateNumberOfMessagesNotVisible",
        "ApproximateNumberOfMessagesVisible",
        "BackendConnectionErrors",
        "BinLogDiskUsage",
        "BucketSizeBytes",
        "BytesReadIntoMemcached",
        "BytesUsedForCacheItems",
        "BytesUsedForHash",
        "BytesWrittenOutFromMemcached",
        "CPUCreditBalance",
        "CPUCreditUsage",
        "CPUReservation",
        "CPUUtilization",
        "CasBadval",
        "CasHits",
        "CasMisses",
        "CmdConfigGet",
        "CmdConfigSet",
        "CmdFlush",
        "CmdGet",
        "CmdSet",
        "CmdTouch",
        "CurrConfig",
        "CurrConnections",
        "CurrItems",
        "DatabaseConnections",
        "DecrHits",
        "DecrMisses",
        "DeleteHits",
        "DeleteMisses",
        "DiskQueueDepth",
        "DiskReadBytes",
        "DiskReadOps",
        "DiskWriteBytes",
        "DiskWriteOps",
        "Duration",
        "Errors",
        "EvictedUnfetched",
        "Evictions",
        "ExpiredUnfetched",
        "FreeStorageSpace",
        "FreeableMemory",
        "GetHits",
        "GetMisses",
        "HTTPCode_Backend_2XX",
        "HTTPCode_Backend_3XX",
        "HTTPCode_Backend_4XX",
        "HTTPCode_Backend_5XX",
        "HTTPCode_ELB_5XX",
        "HealthyHostCount",
        "IncomingBytes",
        "IncomingLogEvents",
        "IncrHits",
        "IncrMisses",
        "Invocations",
        "Latency",
        "MatchedEvents",
        "MemoryReservation",
        "MemoryUtilization",
        "NetworkBytesIn",
        "NetworkBytesOut",
        "NetworkIn",
        "NetworkOut",
        "NetworkPacketsIn",
        "NetworkPacketsOut",
        "NetworkReceiveThroughput",
        "NetworkTransmitThroughput",
        "NewConnections",
        "NewItems",
        "NumberOfEmptyReceives",
        "NumberOfMessagesDeleted",
        "NumberOfMessagesPublished",
        "NumberOfMessagesReceived",
        "NumberOfMessagesSent",
        "NumberOfNotificationsDelivered",
        "NumberOfNotificationsFailed",
        "NumberOfObjects",
        "OldestReplicationSlotLag",
        "PublishSize",
        "ReadIOPS",
        "ReadLatency",
        "ReadThroughput",
        "Reclaimed",
        "ReplicaLag",
        "RequestCount",
        "SentMessageSize",
        "StatusCheckFailed",
        "StatusCheckFailed_Instance",
        "StatusCheckFailed_System",
        "SurgeQueueLength",
        "SwapUsage",
        "Throttles",
        "TouchHits",
        "TouchMisses",
        "TransactionLogsDiskUsage",
        "TriggeredRules",
        "UnHealthyHostCount",
        "UnusedMemory",
        "VolumeIdleTime",
        "VolumeQueueLength",
        "VolumeReadBytes",
        "VolumeReadOps",
        "VolumeTotalReadTime",
        "VolumeTotalWriteTime",
        "VolumeWriteBytes",
        "VolumeWriteOps",
        "WriteIOPS",
        "WriteLatency",
        "WriteThroughput",
    }
)


def metric_query_for(
    instance: Instance, metric_name: str, *, now: datetime | None = None
) -> MetricQuery:
    if metric_name not in METRIC_NAMES:
        raise UnknownMetricError(metric_name)

    dimensions = INSTANCE_METRIC_DIMENSIONS.get(instance.kind)
    if dimensions is None:
        raise UnknownInstanceMetricTypeError()
    namespace, dimension_name = dimensions

    end = (now or datetime.now(tz=UTC)) - METRIC_LAG
    return MetricQuery(
        namespace=namespace,
        dimension_name=dimension_name,
        dimension_value=instance.instance_id,
        metric_name=metric_name,
        start=end - METRIC_WINDOW,
        end=end,
        period=METRIC_PERIOD_SECONDS,
        statistic=METRIC_STATISTIC,
    )
