# netwatchdog

Watches a set of hosts on your network, notices when they all stop answering,
and runs recovery commands of your choosing until the connection comes back.

## Installation

```
pip install .
```

The desktop window uses tkinter, which must be present in your Python
installation. The tests need the `test` extra (`pip install .[test]`).

## Usage

Start monitoring with the default configuration file `config.toml` in the
current directory. If the file does not exist, a default one is written first.
Stop with Ctrl+C.

```
netwatchdog
```

Use a different configuration file, or turn on debug logging:

```
netwatchdog --config /path/to/config.toml --debug
```

Check every configured target once (ping, and a TCP connection when the
target has a `port`) and log the result:

```
netwatchdog status
```

Test connectivity to one host: a ping, TCP connections to ports 80, 443 and
8080, and a listing of the system's network interfaces. Without `--host` the
configured `default_target` is used:

```
netwatchdog test --host 192.168.1.1
```

Open the desktop window, with tabs for target status, settings and the log,
menus to start and stop monitoring and to run the recovery actions, and a
TOML editor for the configuration:

```
netwatchdog gui
```

The command logs to standard error in the form
`YYYY-MM-DD HH:MM:SS [LEVEL] - message`. It exits with status 1 when the
configuration cannot be read or parsed.

## Configuration

The configuration is a TOML file:

```toml
default_target = "8.8.8.8"
check_interval_sec = 60
ping_timeout_ms = 1000
retry_count = 3
log_file = "network_monitor.log"
notification_enabled = true
notification_command = "echo recovered"

[[targets]]
name = "Google DNS"
address = "8.8.8.8"
timeout_ms = 1000
retry_count = 3

[[targets]]
name = "Local Router"
address = "192.168.1.1"
port = 80
timeout_ms = 500
retry_count = 2

[[recovery_actions]]
name = "Restart network adapter"
command = "Restart-NetAdapter -Name 'Ethernet' -Confirm:$false"
wait_after_ms = 5000
```

- `targets` are checked every `check_interval_sec` seconds. Each target may
  override `timeout_ms` and `retry_count`. Pings go through the system `ping`
  program and need an IP address, not a host name.
- When every target fails, the `recovery_actions` run in order. After each
  successful action (and its optional `wait_after_ms` pause) the
  `default_target` is pinged. As soon as it answers, recovery stops, and
  `notification_command` runs if `notification_enabled` is true.
- Commands run through PowerShell on Windows and through `sh -c` elsewhere,
  so write them for the shell of the machine they run on. The default
  configuration's commands are PowerShell commands.
- `log_file` is opened only if no logger has been set up yet in the process.
  The `netwatchdog` command always sets up its console logger first, so there
  it logs to standard error only.

## Library use

```python
import asyncio

from netwatchdog.config import load_config
from netwatchdog.monitor import check_status

config = load_config("config.toml")
results = asyncio.run(check_status(config))
# {"Google DNS": (True, None), "Local Router": (True, False), ...}
```

`Config.default()` gives the built-in defaults, `Config.from_toml()` and
`Config.to_toml()` convert to and from TOML text, and
`save_config(config, path)` writes a configuration back to a file. Invalid
files raise `ConfigError`.

`netwatchdog.monitor.start_monitoring(config, stop_event)` runs the
monitoring loop until the event is set. `netwatchdog.network` has the single
checks (`ping_host`, `check_port`, `execute_command`, `network_interfaces`)
and helpers for `restart_network_interface`, `flush_dns` and `renew_ip`;
they raise `NetworkError` on failure.

`netwatchdog.app.NetworkMonitorApp` holds the state behind the desktop window
(target statuses, log lines, background monitoring and recovery, the settings
editor) without any window, so it can drive another interface.

## What it does not do

netwatchdog does not install itself as a system service and has no service
mode; to keep it running in the background, start the `netwatchdog` command
from your own service manager or scheduler.