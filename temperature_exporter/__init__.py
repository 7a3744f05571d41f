PACKAGE_LOGGER_NAME = "temperature_exporter"
