from __future__ import annotations

from checkup.models.enums import Metric, Severity
from checkup.models.finding import Finding, Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.classify import evaluate
from checkup.services.units import wifi_band


def _wifi(section: Section, sensors: Sensors) -> None:
    power = sensors.get_bool(SensorName.WIFI_POWER)
    if power is False:
        section.note("Wi-Fi is OFF")
        return
    ssid = sensors.get_text(SensorName.WIFI_SSID)
    if ssid:
        section.add(Finding("Wi-Fi", Severity.GOOD, f"Connected to: {ssid}"))
    elif power:
        section.add(
            Finding(
                "Wi-Fi",
                Severity.CRITICAL,
                "Not connected to any Wi-Fi network",
                recommendation="Wi-Fi is not connected to any network.",
            )
        )
        return
    else:
        section.note("Wi-Fi: could not determine")
        return

    rssi = sensors.get_int(SensorName.WIFI_RSSI)
    section.add(evaluate(Metric.WIFI_SIGNAL, rssi, "Wi-Fi Signal", "Signal strength: {label} ({value} dBm)"))
    channel = sensors.get_int(SensorName.WIFI_CHANNEL)
    band = wifi_band(channel)
    if band == "2.4 GHz":
        section.note(f"Band: 2.4 GHz (channel {channel}); 5 GHz is faster if your router supports it")
    elif band:
        section.note(f"Band: {band} (channel {channel}), the faster band", Severity.GOOD)


def _internet(section: Section, sensors: Sensors) -> None:
    section.heading("Internet")
    ping = sensors.get_float(SensorName.PING_MS)
    if ping is not None:
        section.add(
            evaluate(
                Metric.NETWORK_LATENCY,
                ping,
                "Latency",
                "Ping: {ping:.1f} ms ({label})",
                ping=ping,
            )
        )
    elif sensors.get_bool(SensorName.INTERNET_REACHABLE) is False:
        section.add(
            Finding(
                "Internet",
                Severity.CRITICAL,
                "Cannot reach the internet",
                recommendation="The internet is unreachable. Check your Wi-Fi connection and router.",
            )
        )
    else:
        section.note("Internet: could not determine")

    dns = sensors.get_bool(SensorName.DNS_OK)
    if dns is True:
        section.add(Finding("DNS", Severity.GOOD, "DNS resolution: Working"))
    elif dns is False:
        section.add(
            Finding(
                "DNS",
                Severity.CRITICAL,
                "DNS resolution: FAILING",
                recommendation="DNS is not resolving. Change DNS servers to 8.8.8.8 or 1.1.1.1.",
            )
        )
    else:
        section.note("DNS resolution: could not determine")


def check_network(sensors: Sensors) -> Section:
    section = Section("Wi-Fi & Network")
    _wifi(section, sensors)
    _internet(section, sensors)
    return section
