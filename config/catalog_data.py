"""
JustTheChip: Preset Catalogs
============================

Static catalog tables in their serialized (JSON-compatible) shape:
tool types, cut types, materials, spindles and machine presets.

core.catalog.Catalog.from_mapping() turns these into typed records.
A JSON file with the same top-level keys can replace them at start-up.
"""

TOOL_TYPES = {
    "endmill_flat": {
        "name": "Flat End Mill",
        "parameters": ["diameter_mm", "flutes", "stickout_mm", "shank_mm"],
        "supported_cuts": ["slot", "profile", "adaptive", "facing", "plunge"],
        "speed_factors": {"slot": 1.0, "profile": 1.2, "adaptive": 1.3, "facing": 1.1},
    },
    "endmill_ball": {
        "name": "Ball End Mill",
        "parameters": ["diameter_mm", "flutes", "stickout_mm", "shank_mm"],
        "supported_cuts": ["profile", "adaptive", "3d_contour"],
        "speed_factors": {"profile": 0.9, "adaptive": 1.0, "3d_contour": 0.8},
    },
    "chamfer": {
        "name": "Chamfer Mill",
        "parameters": ["diameter_mm", "angle_deg", "flutes", "tip_diameter_mm"],
        "supported_cuts": ["chamfer", "deburr", "countersink"],
        "speed_factors": {"chamfer": 1.2, "deburr": 1.5, "countersink": 1.0},
    },
    "vbit": {
        "name": "V-Bit / V-Carve",
        "parameters": ["angle_deg", "tip_diameter_mm", "max_diameter_mm", "flutes"],
        "supported_cuts": ["vcarve", "engraving", "chamfer"],
        "speed_factors": {"vcarve": 0.8, "engraving": 1.0, "chamfer": 0.9},
    },
    "facemill": {
        "name": "Face Mill (Insert)",
        "parameters": ["diameter_mm", "insert_count", "insert_size_mm", "max_doc_mm"],
        "supported_cuts": ["facing", "shoulder", "ramping"],
        "speed_factors": {"facing": 1.4, "shoulder": 1.2, "ramping": 0.8},
    },
    "drill": {
        "name": "Drill Bit",
        "parameters": ["diameter_mm", "flutes", "point_angle_deg", "flute_length_mm"],
        "supported_cuts": ["drilling", "spot_drill", "peck_drill"],
        "speed_factors": {"drilling": 1.0, "spot_drill": 1.2, "peck_drill": 0.9},
    },
    "threadmill": {
        "name": "Thread Mill",
        "parameters": ["diameter_mm", "pitch_mm", "flutes", "thread_depth_mm"],
        "supported_cuts": ["thread_mill", "helical"],
        "speed_factors": {"thread_mill": 0.7, "helical": 0.8},
    },
    "tapered": {
        "name": "Tapered End Mill",
        "parameters": ["tip_diameter_mm", "taper_angle_deg", "flutes", "flute_length_mm"],
        "supported_cuts": ["profile", "3d_contour", "draft_angle"],
        "speed_factors": {"profile": 0.9, "3d_contour": 0.85, "draft_angle": 1.0},
    },
    "boring": {
        "name": "Boring Bar",
        "parameters": ["min_bore_diameter_mm", "bar_diameter_mm", "max_depth_mm", "insert_type"],
        "supported_cuts": ["boring", "internal_profile"],
        "speed_factors": {"boring": 0.8, "internal_profile": 0.7},
    },
    "slitting": {
        "name": "Slitting Saw",
        "parameters": ["diameter_mm", "width_mm", "teeth", "arbor_hole_mm"],
        "supported_cuts": ["slitting", "grooving"],
        "speed_factors": {"slitting": 0.6, "grooving": 0.7},
    },
}

CUT_TYPES = {
    # Standard milling
    "slot": {"name": "Slotting", "ae_fraction": 1.0, "ap_fraction_range": [0.8, 1.0],
             "tool_types": ["endmill_flat", "endmill_ball"]},
    "profile": {"name": "Profile (Side)", "ae_fraction_range": [0.2, 0.4],
                "ap_fraction_range": [1.0, 1.5],
                "tool_types": ["endmill_flat", "endmill_ball", "tapered"]},
    "adaptive": {"name": "Adaptive/Trochoidal", "ae_fraction_range": [0.1, 0.2],
                 "ap_fraction_range": [1.5, 3.0],
                 "tool_types": ["endmill_flat", "endmill_ball"]},
    "facing": {"name": "Facing", "ae_fraction_range": [0.6, 0.8],
               "ap_fraction_range": [0.1, 0.3],
               "tool_types": ["endmill_flat", "facemill"]},
    "plunge": {"name": "Plunging", "ae_fraction": 1.0, "ap_fraction_range": [0.1, 0.3],
               "tool_types": ["endmill_flat"]},

    # Specialized
    "chamfer": {"name": "Chamfering", "ae_fraction_range": [0.3, 0.5],
                "ap_fraction_range": [0.5, 1.0], "tool_types": ["chamfer", "vbit"]},
    "deburr": {"name": "Deburring", "ae_fraction_range": [0.1, 0.2],
               "ap_fraction_range": [0.1, 0.3], "tool_types": ["chamfer"]},
    "countersink": {"name": "Countersinking", "ae_fraction": 1.0,
                    "ap_fraction_range": [0.2, 0.5], "tool_types": ["chamfer"]},
    "vcarve": {"name": "V-Carving", "ae_fraction_range": [0.8, 1.0],
               "ap_fraction_range": [0.5, 1.0], "tool_types": ["vbit"]},
    "engraving": {"name": "Engraving", "ae_fraction_range": [0.5, 0.8],
                  "ap_fraction_range": [0.1, 0.3], "tool_types": ["vbit"]},
    "shoulder": {"name": "Shoulder Milling", "ae_fraction_range": [0.3, 0.5],
                 "ap_fraction_range": [0.8, 1.2], "tool_types": ["facemill"]},
    "ramping": {"name": "Ramping", "ae_fraction_range": [0.4, 0.6],
                "ap_fraction_range": [0.2, 0.4], "tool_types": ["facemill"]},
    "drilling": {"name": "Drilling", "ae_fraction": 1.0, "ap_fraction_range": [2.0, 5.0],
                 "tool_types": ["drill"]},
    "spot_drill": {"name": "Spot Drilling", "ae_fraction": 1.0,
                   "ap_fraction_range": [0.2, 0.5], "tool_types": ["drill"]},
    "peck_drill": {"name": "Peck Drilling", "ae_fraction": 1.0,
                   "ap_fraction_range": [0.5, 1.5], "tool_types": ["drill"]},
    "thread_mill": {"name": "Thread Milling", "ae_fraction_range": [0.6, 0.8],
                    "ap_fraction_range": [0.3, 0.5], "tool_types": ["threadmill"]},
    "helical": {"name": "Helical Interpolation", "ae_fraction_range": [0.4, 0.6],
                "ap_fraction_range": [0.2, 0.4], "tool_types": ["threadmill"]},
    "3d_contour": {"name": "3D Contouring", "ae_fraction_range": [0.1, 0.3],
                   "ap_fraction_range": [0.1, 0.5], "tool_types": ["endmill_ball", "tapered"]},
    "draft_angle": {"name": "Draft Angle", "ae_fraction_range": [0.2, 0.4],
                    "ap_fraction_range": [0.8, 1.5], "tool_types": ["tapered"]},
    "boring": {"name": "Boring", "ae_fraction": 1.0, "ap_fraction_range": [0.3, 0.6],
               "tool_types": ["boring"]},
    "internal_profile": {"name": "Internal Profiling", "ae_fraction_range": [0.2, 0.4],
                         "ap_fraction_range": [0.5, 1.0], "tool_types": ["boring"]},
    "slitting": {"name": "Slitting", "ae_fraction": 1.0, "ap_fraction_range": [8.0, 15.0],
                 "tool_types": ["slitting"]},
    "grooving": {"name": "Grooving", "ae_fraction": 1.0, "ap_fraction_range": [5.0, 10.0],
                 "tool_types": ["slitting"]},
}


def _buckets(*ranges):
    """Chip-load buckets at the standard 3/6/10/20 mm breakpoints."""
    return [
        {"max_d_mm": d, "range": list(r)}
        for d, r in zip((3, 6, 10, 20), ranges)
    ]


MATERIALS = {
    "al_6061_t6": {
        "name": "Aluminum 6061-T6",
        "category": "metal",
        "vc_range": [76, 305],
        "fz_by_diameter": _buckets((0.008, 0.025), (0.020, 0.050),
                                   (0.040, 0.080), (0.060, 0.120)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.8, "chamfer": 0.7, "vbit": 0.6,
            "facemill": 1.3, "drill": 0.5, "threadmill": 0.4, "tapered": 0.85,
            "boring": 0.7, "slitting": 0.6,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.35, "adaptive": 0.15, "facing": 0.75,
            "chamfer": 0.4, "vcarve": 0.8, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 1.0, "profile": 1.5, "adaptive": 2.0, "facing": 0.2,
            "chamfer": 0.5, "vcarve": 0.8, "drilling": 3.0, "boring": 0.5,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 0.7,
        "specific_cutting_energy_j_mm3": 0.5,
        "thermal_conductivity": 167,
        "notes": "Excellent machinability; avoid work hardening at low speeds.",
    },
    "steel_1018": {
        "name": "Steel 1018 (Low Carbon)",
        "category": "metal",
        "vc_range": [24, 91],
        "fz_by_diameter": _buckets((0.003, 0.012), (0.008, 0.025),
                                   (0.015, 0.040), (0.025, 0.060)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.7, "chamfer": 0.6, "vbit": 0.5,
            "facemill": 1.2, "drill": 0.4, "threadmill": 0.3, "tapered": 0.75,
            "boring": 0.6, "slitting": 0.5,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.25, "adaptive": 0.10, "facing": 0.6,
            "chamfer": 0.3, "vcarve": 0.6, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 0.5, "profile": 0.8, "adaptive": 1.2, "facing": 0.1,
            "chamfer": 0.3, "vcarve": 0.4, "drilling": 2.0, "boring": 0.3,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 1.8,
        "specific_cutting_energy_j_mm3": 2.5,
        "thermal_conductivity": 51,
        "notes": "Good general-purpose steel; consistent machining properties.",
    },
    "stainless_304": {
        "name": "304 Stainless Steel",
        "category": "metal",
        "vc_range": [12, 46],
        "fz_by_diameter": _buckets((0.002, 0.008), (0.006, 0.015),
                                   (0.012, 0.025), (0.020, 0.040)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.6, "chamfer": 0.5, "vbit": 0.4,
            "facemill": 1.1, "drill": 0.3, "threadmill": 0.2, "tapered": 0.65,
            "boring": 0.5, "slitting": 0.4,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.15, "adaptive": 0.06, "facing": 0.4,
            "chamfer": 0.2, "vcarve": 0.4, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 0.3, "profile": 0.5, "adaptive": 0.8, "facing": 0.06,
            "chamfer": 0.2, "vcarve": 0.25, "drilling": 1.0, "boring": 0.2,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 2.0,
        "specific_cutting_energy_j_mm3": 3.5,
        "thermal_conductivity": 16,
        "notes": "Work hardens easily; maintain consistent chipload.",
    },
    "titanium": {
        "name": "Titanium (Ti-6Al-4V)",
        "category": "metal",
        "vc_range": [9, 37],
        "fz_by_diameter": _buckets((0.001, 0.006), (0.004, 0.012),
                                   (0.008, 0.020), (0.015, 0.030)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.55, "chamfer": 0.45, "vbit": 0.35,
            "facemill": 1.05, "drill": 0.25, "threadmill": 0.18, "tapered": 0.6,
            "boring": 0.45, "slitting": 0.35,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.10, "adaptive": 0.04, "facing": 0.3,
            "chamfer": 0.15, "vcarve": 0.3, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 0.2, "profile": 0.3, "adaptive": 0.5, "facing": 0.04,
            "chamfer": 0.15, "vcarve": 0.2, "drilling": 0.75, "boring": 0.15,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 2.5,
        "specific_cutting_energy_j_mm3": 5.0,
        "thermal_conductivity": 7,
        "notes": "Extremely tough; requires sharp tools and flood coolant.",
    },
    "acrylic": {
        "name": "Acrylic (PMMA)",
        "category": "plastic",
        "vc_range": [91, 366],
        "fz_by_diameter": _buckets((0.01, 0.04), (0.03, 0.08),
                                   (0.06, 0.12), (0.10, 0.20)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.9, "chamfer": 0.8, "vbit": 0.7,
            "facemill": 1.5, "drill": 0.7, "threadmill": 0.5, "tapered": 0.95,
            "boring": 0.8, "slitting": 0.85,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.50, "adaptive": 0.25, "facing": 0.85,
            "chamfer": 0.55, "vcarve": 0.9, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 2.0, "profile": 3.0, "adaptive": 4.0, "facing": 0.35,
            "chamfer": 1.2, "vcarve": 1.8, "drilling": 5.0, "boring": 1.2,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 0.25,
        "specific_cutting_energy_j_mm3": 0.1,
        "thermal_conductivity": 0.19,
        "notes": "Sharp tools essential; avoid melting from heat buildup.",
    },
    "delrin": {
        "name": "Delrin (POM)",
        "category": "plastic",
        "vc_range": [122, 457],
        "fz_by_diameter": _buckets((0.015, 0.05), (0.04, 0.10),
                                   (0.08, 0.15), (0.12, 0.25)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.9, "chamfer": 0.8, "vbit": 0.75,
            "facemill": 1.2, "drill": 0.8, "threadmill": 0.6, "tapered": 1.0,
            "boring": 0.85, "slitting": 0.9,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.45, "adaptive": 0.20, "facing": 0.8,
            "chamfer": 0.5, "vcarve": 0.85, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 1.8, "profile": 2.5, "adaptive": 3.5, "facing": 0.25,
            "chamfer": 0.8, "vcarve": 1.2, "drilling": 4.5, "boring": 0.8,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 0.35,
        "specific_cutting_energy_j_mm3": 0.15,
        "thermal_conductivity": 0.31,
        "notes": "Tougher than acrylic; good chip evacuation needed.",
    },
    "mdf": {
        "name": "MDF",
        "category": "wood",
        "vc_range": [122, 610],
        "fz_by_diameter": _buckets((0.02, 0.06), (0.05, 0.12),
                                   (0.10, 0.20), (0.15, 0.30)),
        "tool_chipload_factors": {
            "endmill_flat": 1.0, "endmill_ball": 0.95, "chamfer": 0.9, "vbit": 0.85,
            "facemill": 1.4, "drill": 0.9, "threadmill": 0.7, "tapered": 1.1,
            "boring": 0.9, "slitting": 1.0,
        },
        "max_radial_engagement_fraction": {
            "slot": 1.0, "profile": 0.50, "adaptive": 0.25, "facing": 0.85,
            "chamfer": 0.55, "vcarve": 0.9, "drilling": 1.0, "boring": 1.0,
        },
        "max_axial_per_pass_d": {
            "slot": 2.0, "profile": 3.0, "adaptive": 4.0, "facing": 0.35,
            "chamfer": 1.2, "vcarve": 1.8, "drilling": 5.0, "boring": 1.2,
        },
        "chip_thinning_below_fraction": 0.5,
        "force_coeff_kn_mm2": 0.15,
        "specific_cutting_energy_j_mm3": 0.05,
        "thermal_conductivity": 0.05,
        "notes": "Watch for grain direction; sharp tools essential.",
    },
}

SPINDLES = {
    # Routers
    "dewalt_611": {"name": "DeWalt DWP611 (Fixed Speed)", "rated_power_kw": 1.25,
                   "rpm_min": 16000, "rpm_max": 27000, "base_rpm": 16000, "cooling": "air"},
    "dewalt_611_vfd": {"name": "DeWalt DWP611 (VFD Controlled)", "rated_power_kw": 1.25,
                       "rpm_min": 8000, "rpm_max": 27000, "base_rpm": 16000, "cooling": "air"},
    "makita_rt0701c": {"name": "Makita RT0701C", "rated_power_kw": 1.25,
                       "rpm_min": 10000, "rpm_max": 30000, "base_rpm": 15000, "cooling": "air"},
    # Water-cooled
    "water_2_2kw": {"name": "2.2kW Water-Cooled Spindle", "rated_power_kw": 2.2,
                    "rpm_min": 6000, "rpm_max": 24000, "base_rpm": 12000, "cooling": "water"},
    "water_1_5kw": {"name": "1.5kW Water-Cooled Spindle", "rated_power_kw": 1.5,
                    "rpm_min": 8000, "rpm_max": 24000, "base_rpm": 12000, "cooling": "water"},
    "water_3_2kw": {"name": "3.2kW Water-Cooled Spindle", "rated_power_kw": 3.2,
                    "rpm_min": 6000, "rpm_max": 18000, "base_rpm": 10000, "cooling": "water"},
    # Air-cooled
    "air_2_2kw": {"name": "2.2kW Air-Cooled Spindle", "rated_power_kw": 2.2,
                  "rpm_min": 8000, "rpm_max": 24000, "base_rpm": 12000, "cooling": "air"},
    "air_1_5kw": {"name": "1.5kW Air-Cooled Spindle", "rated_power_kw": 1.5,
                  "rpm_min": 10000, "rpm_max": 24000, "base_rpm": 12000, "cooling": "air"},
    # High speed
    "high_speed_24k": {"name": "High-Speed 24k RPM Spindle", "rated_power_kw": 1.5,
                       "rpm_min": 12000, "rpm_max": 24000, "base_rpm": 18000, "cooling": "air"},
    "high_speed_40k": {"name": "High-Speed 40k RPM Spindle", "rated_power_kw": 1.0,
                       "rpm_min": 20000, "rpm_max": 40000, "base_rpm": 30000, "cooling": "air"},
    # Manual mill
    "manual_r8": {"name": "Manual Mill (R8 Spindle)", "rated_power_kw": 1.5,
                  "rpm_min": 100, "rpm_max": 4000, "base_rpm": 1000, "cooling": "none"},
    "custom": {"name": "Custom Spindle", "rated_power_kw": 2.2,
               "rpm_min": 8000, "rpm_max": 24000, "base_rpm": 12000, "cooling": "water"},
}

MACHINES = {
    "custom": {
        "name": "Custom Configuration",
        "description": "User-defined machine parameters",
        "rigidity_factor": 1.0,
        "aggressiveness": {"radial": 1.0, "axial": 1.0, "feed": 1.0},
        "max_feed_mm_min": {"x": 6000, "y": 6000, "z": 2000},
    },
    "light_hobby": {
        "name": "Light Hobby CNC",
        "description": "3018/6040 style router with basic components",
        "rigidity_factor": 0.6,
        "aggressiveness": {"radial": 0.6, "axial": 0.6, "feed": 0.7},
        "max_feed_mm_min": {"x": 3000, "y": 3000, "z": 1000},
    },
    "printnc": {
        "name": "PrintNC (Baseline)",
        "description": "Community PrintNC design with NEMA23 steppers",
        "rigidity_factor": 1.0,
        "aggressiveness": {"radial": 1.0, "axial": 1.0, "feed": 1.0},
        "max_feed_mm_min": {"x": 6000, "y": 6000, "z": 2000},
    },
    "rigid_hobby": {
        "name": "Rigid Hobby Mill",
        "description": "Heavy hobby machine with servo motors",
        "rigidity_factor": 1.2,
        "aggressiveness": {"radial": 1.1, "axial": 1.1, "feed": 1.1},
        "max_feed_mm_min": {"x": 8000, "y": 8000, "z": 3000},
    },
    "benchtop": {
        "name": "Benchtop Mill",
        "description": "Commercial benchtop mill with high-performance drives",
        "rigidity_factor": 1.5,
        "aggressiveness": {"radial": 1.2, "axial": 1.2, "feed": 1.2},
        "max_feed_mm_min": {"x": 10000, "y": 10000, "z": 4000},
    },
    "vmc_like": {
        "name": "VMC-like Machine",
        "description": "Industrial vertical machining center specifications",
        "rigidity_factor": 2.0,
        "aggressiveness": {"radial": 1.4, "axial": 1.4, "feed": 1.4},
        "max_feed_mm_min": {"x": 15000, "y": 15000, "z": 6000},
    },
}

CATALOG_DATA = {
    "tool_types": TOOL_TYPES,
    "cut_types": CUT_TYPES,
    "materials": MATERIALS,
    "spindles": SPINDLES,
    "machines": MACHINES,
}
