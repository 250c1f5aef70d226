"""Constants and kind lists used throughout the converter."""

# Kubebuilder-style projects prefix every manager object with this; it never
# belongs in a values key.
CONTROLLER_MANAGER_PREFIX = "controller-manager-"

# Labels the chart's "<chart>.labels" helper already renders
HELM_OWNED_LABELS = (
    "app.kubernetes.io/managed-by",
    "app.kubernetes.io/version",
    "app.kubernetes.io/instance",
    "helm.sh/chart",
)

# Top-level manifest fields that are never copied into a template body
NON_BODY_FIELDS = ("apiVersion", "kind", "metadata", "status")

# Header for generated files that are plain YAML (not templates)
GENERATED_HEADER = "# Generated by manifest2chart — do not edit manually\n"

CONFIG_FILE = "manifest2chart.yaml"
CONFIG_VERSION_KEY = "manifest2chartVersion"

# Closing marker for templates wrapped in an "enabled" conditional
END_MARKER = "{{- end }}"
