import logging

import streamlit as st
import matplotlib.pyplot as plt

from ninth_age_dice import (
    DEFAULT_ITERATIONS,
    CombatResolver,
    DiceExpressionError,
    DiceRoller,
    SimulationError,
    SimulationParameters,
    run_simulation_with_stats,
    validate_dice_expression,
)
from ninth_age_dice.charts import plot_convergence, plot_distribution

logger = logging.getLogger(__name__)

# Page config
st.set_page_config(
    page_title="Ninth Age Combat Simulator",
    page_icon="🎲",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .stat-container {
        padding: 10px;
        border-left: 3px solid #4CAF50;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)

# Constants
THRESHOLD_OPTIONS = ["auto", 2, 3, 4, 5, 6, "none"]
FAILURE_REROLL_OPTIONS = ["none", "1s", "all"]
SUCCESS_REROLL_OPTIONS = ["none", "6s", "all"]
ITERATION_OPTIONS = [1000, 5000, DEFAULT_ITERATIONS, 50000]


def format_threshold(value):
    if value == "auto":
        return "Auto"
    if value == "none":
        return "None"
    return f"{value}+"


def dice_input(label, value, help_text, key, errors):
    """Text input for a number or dice expression; records parse errors instead of raising"""
    text = st.text_input(label, value=value, help=help_text, key=key)
    try:
        return validate_dice_expression(text)
    except DiceExpressionError as e:
        logger.info("Rejected %s input %r", label, text)
        errors.append(f"{label}: {e}")
        return None


def reroll_inputs(prefix, key):
    col1, col2 = st.columns(2)
    with col1:
        failures = st.selectbox(f"{prefix} reroll failures", options=FAILURE_REROLL_OPTIONS, key=f"{key}_fail")
    with col2:
        successes = st.selectbox(f"{prefix} reroll successes", options=SUCCESS_REROLL_OPTIONS, key=f"{key}_succ")
    return failures, successes


def render_attack_config():
    """Render the attack form. Returns (parameters, errors)."""
    errors = []

    st.subheader("ATTACKS")
    col1, col2, col3 = st.columns(3)
    with col1:
        num_attacks = dice_input("Number of Attacks", "10", "Enter a number or dice expression (D3, D6, 2D6+1)",
                                 "attacks", errors)
    with col2:
        to_hit = st.selectbox("Hit on", options=THRESHOLD_OPTIONS, index=3, format_func=format_threshold, key="to_hit")
    with col3:
        to_wound = st.selectbox("Wound on", options=THRESHOLD_OPTIONS, index=3, format_func=format_threshold,
                                key="to_wound")
    hit_fail, hit_succ = reroll_inputs("Hit", "hit_reroll")
    wound_fail, wound_succ = reroll_inputs("Wound", "wound_reroll")

    st.markdown("---")
    st.subheader("SAVES (Defender)")
    col1, col2, col3 = st.columns(3)
    with col1:
        armor_save = st.selectbox("Armor save", options=THRESHOLD_OPTIONS, index=6, format_func=format_threshold,
                                  key="armor_save")
    with col2:
        armor_piercing = st.selectbox("Armor Piercing", options=list(range(0, 7)), key="armor_piercing")
    with col3:
        special_save = st.selectbox("Special save (ward/regen)", options=THRESHOLD_OPTIONS, index=6,
                                    format_func=format_threshold, key="special_save")
    armor_fail, armor_succ = reroll_inputs("Armor save", "armor_reroll")
    special_fail, special_succ = reroll_inputs("Special save", "special_reroll")

    st.markdown("---")
    st.subheader("SPECIAL RULES")
    col1, col2, col3 = st.columns(3)
    with col1:
        poison = st.checkbox("Poison (6s to hit auto-wound)", key="poison")
        poison_on_5_plus = st.checkbox("Poison on 5+", key="poison_5")
    with col2:
        lethal_strike = st.checkbox("Lethal Strike (6s to wound ignore saves)", key="lethal")
        fury = st.checkbox("Fury (6s to hit score 2 hits)", key="fury")
    with col3:
        red_fury = st.checkbox("Red Fury (unsaved wounds attack again)", key="red_fury")

    col1, col2, col3 = st.columns(3)
    with col1:
        multiple_wounds = dice_input("Multiple Wounds", "1", "Wounds per unsaved wound (1, D3, D6+1)",
                                     "multiple_wounds", errors)
    with col2:
        cap_enabled = st.checkbox("Cap at target's wounds", key="cap_enabled")
        target_max_wounds = st.number_input("Target Wounds", min_value=1, max_value=20, value=3, step=1,
                                            key="target_max", disabled=not cap_enabled)
    with col3:
        iterations = st.selectbox("Iterations", options=ITERATION_OPTIONS, index=2, key="iterations")

    if errors:
        return None, errors

    try:
        params = SimulationParameters(
            num_attacks=num_attacks,
            to_hit=to_hit,
            to_wound=to_wound,
            reroll_hit_failures=hit_fail,
            reroll_hit_successes=hit_succ,
            reroll_wound_failures=wound_fail,
            reroll_wound_successes=wound_succ,
            armor_save=armor_save,
            armor_piercing=armor_piercing,
            reroll_armor_save_failures=armor_fail,
            reroll_armor_save_successes=armor_succ,
            special_save=special_save,
            reroll_special_save_failures=special_fail,
            reroll_special_save_successes=special_succ,
            poison=poison,
            poison_on_5_plus=poison_on_5_plus,
            lethal_strike=lethal_strike,
            fury=fury,
            red_fury=red_fury,
            multiple_wounds=multiple_wounds,
            target_max_wounds=int(target_max_wounds) if cap_enabled else None,
            iterations=iterations,
        )
    except SimulationError as e:
        return None, [str(e)]
    return params, []


def render_results(results, expected):
    st.markdown("---")
    st.subheader("📊 Results")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Mean", f"{results.mean:.2f}")
        st.metric("Expected", f"{expected:.2f}")
    with col2:
        st.metric("Median", f"{results.median:g}")
        st.metric("Mode", results.mode)
    with col3:
        st.metric("Std Dev", f"{results.std_dev:.2f}")
        st.metric("10th - 90th", f"{results.percentiles[10]:g} - {results.percentiles[90]:g}")
    with col4:
        st.metric("Min", results.min)
        st.metric("Max", results.max)

    st.caption(f"{results.total_iterations} iterations in {results.execution_time_ms:.0f} ms")

    if results.max == 0:
        st.info("The attack never dealt any wounds with these settings.")
        return

    fig = plot_distribution(results)
    st.pyplot(fig)
    plt.close(fig)

    st.write("**Chance to deal at least:**")
    rows = [
        {
            "Wounds": point.wounds,
            "Exactly (%)": round(point.probability, 2),
            "At least (%)": round(results.probability_at_least(point.wounds), 2),
        }
        for point in results.probability_distribution
    ]
    st.dataframe(rows, hide_index=True, use_container_width=True)

    fig = plot_convergence(results, expected)
    if fig is not None:
        with st.expander("Convergence"):
            st.pyplot(fig)
        plt.close(fig)


def main():
    # Sidebar
    with st.sidebar:
        st.title("🎲 Ninth Age Simulator")
        st.markdown("---")

        st.subheader("About")
        st.write("Estimates the wounds an attack deals by simulating it thousands of times.")

        st.markdown("---")
        st.subheader("Features")
        st.write("✓ Dice expressions for attacks and wounds")
        st.write("✓ Split success/failure rerolls")
        st.write("✓ Armor, AP and special saves")
        st.write("✓ Poison, Lethal Strike, Fury, Red Fury")
        st.write("✓ Full damage distribution")

    st.title("⚔️ Ninth Age Combat Simulator")

    params, errors = render_attack_config()

    run_button = st.button("⚔️ Simulate", type="primary", use_container_width=True, disabled=bool(errors))
    for error in errors:
        st.error(f"Could not parse input - {error}")

    if run_button and params is not None:
        # Sessions run on separate threads, so each run owns its roller
        roller = DiceRoller()
        with st.spinner("Rolling dice..."):
            results = run_simulation_with_stats(params, roller)
        expected = CombatResolver(roller).calculate_expected_damage(params)
        render_results(results, expected)


if __name__ == "__main__":
    main()
