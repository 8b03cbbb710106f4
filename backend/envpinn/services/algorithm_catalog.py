"""Display metadata for the four scoring algorithms shown in the UI.

Dispatch does not consult this catalogue; see ``pinn_algorithms.run_for_focus``.
"""

DEFAULT_ALGORITHMS = [
    {
        "name": "climode",
        "display_name": "ClimODE",
        "description": "Physics-informed climate modeling with advection principles",
        "category": "climate",
        "accuracy": 92.0,
        "speed": "1000x faster than FEM",
        "physics_constraints": {
            "equations": ["∂u/∂t + ∇·(uv) = 0", "∇·v = ∇·F(u)"],
            "conservation": ["mass", "momentum"],
            "advection": True,
        },
        "parameters": {
            "layers": "8-10 hidden",
            "neurons": "200+ per layer",
            "optimizer": "Adam + L-BFGS",
            "collocationPoints": 20000,
        },
    },
    {
        "name": "pinn-ffht",
        "display_name": "PINN-FFHT",
        "description": "Fluid flow and heat transfer without simulation data",
        "category": "thermal",
        "accuracy": 89.0,
        "speed": "Real-time",
        "physics_constraints": {
            "equations": ["∇²T + Q = 0", "∇·(ρvT) = ∇·(k∇T)"],
            "conservation": ["energy", "mass"],
            "heatTransfer": True,
        },
        "parameters": {
            "boundaryConditions": ["Dirichlet", "Neumann", "mixed"],
            "coordinates": ["Cartesian", "cylindrical"],
            "dynamicBalancing": True,
        },
    },
    {
        "name": "pcnn-tsa",
        "display_name": "PCNN-TSA",
        "description": "Ocean current prediction with Navier-Stokes constraints",
        "category": "oceanographic",
        "accuracy": 94.0,
        "speed": "8-day forecast",
        "physics_constraints": {
            "equations": ["∇·v = 0", "∂v/∂t + (v·∇)v = -∇p/ρ + ν∇²v + f"],
            "conservation": ["momentum", "mass"],
            "coriolisEffect": True,
        },
        "parameters": {
            "rmse": "≤ 0.0014",
            "forecastHorizon": "8 days",
            "spatialAttention": True,
            "temporalSequence": True,
        },
    },
    {
        "name": "land-atmosphere-pinn",
        "display_name": "Land-Atmosphere PINN",
        "description": "Deforestation impact with E3SM land model integration",
        "category": "ecological",
        "accuracy": 87.0,
        "speed": "Regional scale",
        "physics_constraints": {
            "equations": ["∂ET/∂t = f(LAI, T, RH)", "∂T/∂t = f(albedo, roughness)"],
            "conservation": ["energy", "water"],
            "landAtmosphereCoupling": True,
        },
        "parameters": {
            "evapotranspiration": True,
            "surfaceEnergyBalance": True,
            "precipitationFeedback": True,
            "fluxnetCalibration": 29,
        },
    },
]
