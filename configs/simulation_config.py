"""Default scenario configurations for the measurement experiments."""

COINS_CONFIG = {
    "system_type": "quantum",
    "initial_bias": 0.5,
    "number_of_coins": 100,
    "strict_measurement": False,
}

SPIN_CONFIG = {
    "experiment": "EXPERIMENT_3",
    "initial_direction": "Z_PLUS",
    "source_mode": "continuous",
    "emission_rate_hz": 10.0,
    "blocking_mode": "noBlocker",
    "max_particles": 500,
}

BLOCH_CONFIG = {
    "initial_direction": "X_PLUS",
    "measurement_basis": "S_SUB_Z",
    "magnetic_field_strength": 1.0,
    "scene": "precession",
    "single_measurement_mode": False,
    "number_of_multi_systems": 10,
}

PHOTONS_CONFIG = {
    "emission_mode": "manyPhotons",
    "emission_rate_hz": 50.0,
    "polarization_direction": "fortyFiveDegrees",
    "custom_polarization_angle_deg": 45.0,
    "splitter_axis_deg": 0.0,
    "max_photons": 800,
}

RUN_CONFIG = {
    "frames": 600,
    "dt": 1 / 60,  # seconds per frame
    "seed": None,
}

SIMULATION_CONFIG = {
    "coins": COINS_CONFIG,
    "spin": SPIN_CONFIG,
    "bloch": BLOCH_CONFIG,
    "photons": PHOTONS_CONFIG,
    "run": RUN_CONFIG,
}

# Enum fields given by member name rather than value
ENUM_NAME_FIELDS = {
    "spin": {"experiment": "SpinExperimentPreset", "initial_direction": "StateDirection"},
    "bloch": {"initial_direction": "StateDirection", "measurement_basis": "MeasurementBasis"},
}


def get_simulation_config(scenario_name):
    """Get the configuration of a scenario, e.g. 'photons' or 'run.dt'."""
    parts = scenario_name.split('.')
    config = SIMULATION_CONFIG

    for part in parts:
        if part in config:
            config = config[part]
        else:
            raise KeyError(f"Configuration not found for {scenario_name}")

    return config


def validate_config():
    """Validate the run configuration for consistency."""
    errors = []

    if RUN_CONFIG["frames"] < 0:
        errors.append("run.frames must not be negative")
    if RUN_CONFIG["dt"] <= 0:
        errors.append("run.dt must be positive")
    for name in ("coins", "spin", "bloch", "photons"):
        if name not in SIMULATION_CONFIG:
            errors.append(f"missing scenario {name}")

    return len(errors) == 0, errors


if __name__ == "__main__":
    """Example configuration validation."""
    print("Measurement Simulation Configuration")
    print("====================================")

    is_valid, errors = validate_config()
    if is_valid:
        print("✓ Configuration is valid")
    else:
        print("✗ Configuration errors:")
        for error in errors:
            print(f"  - {error}")

    for name in ("coins", "spin", "bloch", "photons"):
        print(f"\n{name}:")
        for key, value in SIMULATION_CONFIG[name].items():
            print(f"  {key}: {value}")
