# philosim

A simulation of the dining philosophers problem. Each philosopher runs in its
own thread and shares a fork with each neighbour. A separate monitor thread
stops the run when a philosopher starves or when every philosopher has eaten
enough meals. Every state change is printed with a timestamp.

## Installation

```
pip install .
```

## Usage

```
philosim <philos> <time to die> <time to eat> <time to sleep> [number of cycles]
```

Every value must be written as plain digits, with no sign, no leading zero and
no spaces, and must lie between 1 and 2147483647. Times are in milliseconds.
If the optional fifth value is given, the run ends once every philosopher has
eaten that many meals. If the arguments are wrong, a usage message is printed
and the command exits with status 1; otherwise it exits with status 0 when the
run is over.

The clock starts about two seconds after start-up, so that every thread is
ready before the first event.

Example:

```
philosim 5 800 200 200 7
```

### Output

Each line reads `<milliseconds> <philosopher> <event>`, where philosophers are
numbered from 1 and the event is one of:

```
has taken a fork
is eating
is sleeping
is thinking
died
```

After a philosopher dies, only the `died` line is printed. A single
philosopher takes the only fork, can never eat, and so dies once the time to
die has passed.

## Library use

- `philosim.args.parse_args(argv)` checks the values that follow the program
  name and returns a `Settings` dataclass (`philos`, `time_to_die`,
  `time_to_eat`, `time_to_sleep`, `max_cycles`; `max_cycles` is 0 when no
  limit is set). It raises `ArgumentError` (a `ValueError`) when the values are
  not acceptable. `parse_int`, `parse_strict` and `validate_args` are the
  lower-level helpers it uses.
- `philosim.simulation.Simulation(settings, out=None, start_delay=2.0)` sets up
  the table; events are written to `out` (standard output by default), and the
  clock starts `start_delay` seconds later. `run()` runs it to the end and
  returns the id of the philosopher who died, or `None` if every philosopher
  ate enough. `check_death()`, `all_fed()`, `next_deadline_ms()` and
  `is_over()` expose the monitor's checks.
- `philosim.clock` holds the `Event` enum, `Clock` (milliseconds elapsed since
  a start time in microseconds), `format_event(ms, philo_id, event)` which
  builds one output line, and `precise_sleep(seconds, stop)` which sleeps until
  the time is up or `stop()` returns true.

## Limitations

The package only prints events as they happen; it keeps no record of past runs
and offers no way to view or analyse the output beyond reading it.