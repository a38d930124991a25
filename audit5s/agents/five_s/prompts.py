"""5S rubric prompt. Categories and JSON schema are fixed here; changing them is a code change."""

FIVE_S_RUBRIC_PROMPT = """Analyze this workplace image for 5S using a 60-point scoring system.

5S Components (50 points total):

Sort (10 points): Removal of unnecessary items in all areas.
  Look for:
  - Furniture & Equipment: benches, carts, machines, cabinets, tool boxes and shelves free of items that do not serve the task.
  - PPE: only the gloves, armguards, glasses, ear plugs and aprons the area needs; expired or extra PPE removed.
  - Documents: only current instructions, visual aids and inspection forms in the work area.
  - Floor & Walk Aisles: floors and surfaces free of hardware, parts, paper, cardboard, debris and trash; walkways clear.
  - Cleaning Equipment: only the rags, mops, brooms, dust pans, solutions and mats the area needs.
  - Tools, Fixtures, Gages: only the tools needed for current workstation jobs.
  - Part Containers: only the totes, baskets and returnable containers in use.
  - Personal Items: lunch boxes, drinks, food and magazines out of the immediate working area.
  - Trash, Scrap and Rework: removed promptly along with their containers.
  - Inventory and WIP: within min/max limits, no excess containers or parts.

Set in Order (10 points): Logical placement and visual organization.
  Look for:
  - Furniture & Equipment: tables, bins, racks, carts and shelves footprinted and labeled.
  - Emergency equipment and E-stops identifiable at a glance and easy to reach.
  - Emergency exits, first-aid stations, electrical panels and hazardous materials labeled and accessible.
  - Documentation and the 5S checklist kept in a designated, labeled location.
  - Floors and walk aisles footprinted and labeled using proper color guidelines.
  - Cleaning equipment labeled and footprinted in its designated location.
  - Tools, fixtures, gauges and air wrenches in their designated locations.
  - Part containers and their shelving labeled with matching part names and numbers.
  - Personal items in designated locations away from the work process.
  - Standard WIP levels and min/max inventory indicators marked.

Shine (10 points): Cleanliness and workspace maintenance.
  Look for:
  - Work stations, PPE, WIP containers, tools, desks, carts and fixtures clean and free of dust or debris.
  - Machines, equipment, benches, bins and totes clean and in place.
  - On-line production material, supplies and part containers clean and easy to find.
  - Tool boards complete and clean.
  - Off-line storage racks, dies, carts and floors clean and in place.
  - Cabinets and shelving clean, neatly stored and labeled.
  - Staging, material holding and quality defect holding areas clean and in place.
  - Performance and communication boards clean and current.
  - Supermarket / pull-system items in place with replenishment procedures.
  - Safety and quality visual aids visible, clean and in good condition.

Standardize (10 points): Visual management and procedures.
  Look for:
  - Consistent locations, labels and markings across all workstations.
  - PPE, WIP containers and tools stored and labeled the same way everywhere.
  - One labeling method for machines, benches and tooling.
  - Standard labels for production materials, supplies and parts storage.
  - Tool boards arranged to the same visual standard in every area.
  - Defined and followed off-line storage standards.
  - Cabinets and shelving standardized by content and consistently labeled.
  - One approach to staging, material holding and defect holding areas.
  - Communication and performance boards with a standard layout.
  - The same replenishment process and visual cues for inventory and WIP throughout.

Sustain (10 points): Evidence of maintained standards.
  Look for:
  - Audit charts current and prominently displayed.
  - Maintenance logs updated and accessible.
  - Continuous-improvement tracking (kaizen events, corrective actions) visible to the team.
  - Training records current, including 5S and safety.
  - SOPs maintained and regularly reviewed.
  - 5S and safety KPIs posted and updated.
  - Shadow boards, kanban cards and signage maintained.
  - Evidence of employee involvement (suggestion boxes, team meetings, recognition).
  - Regular 5S audits with follow-up on deficiencies.
  - Housekeeping standards posted and part of routine work.

Safety Component (10 points, with deductions):
  Start with 10 points and deduct for violations:
  - Minor (-1 point): minor housekeeping issues related to safety (small clutter, missing label).
  - Moderate (-2 points): potential safety hazards (trip hazards, improperly stored chemicals, improper PPE use).
  - Severe (-5 points): immediate dangers or blocked safety equipment (blocked emergency exits, exposed electrical wiring, missing or expired fire extinguishers).

Score every category from 0 to 10. Report each hazard with its deduction.

Respond with ONLY a JSON object in exactly this format:
{
    "scores": {
        "sort": {"score": 0, "observations": "detailed findings"},
        "set": {"score": 0, "observations": "detailed findings"},
        "shine": {"score": 0, "observations": "detailed findings"},
        "standardize": {"score": 0, "observations": "detailed findings"},
        "sustain": {"score": 0, "observations": "detailed findings"},
        "safety": {"score": 0, "observations": "detailed findings"}
    },
    "safety_hazards": [
        {
            "severity": "minor/moderate/severe",
            "description": "specific hazard description",
            "deduction": 0,
            "location": "where in the image",
            "recommendation": "how to fix"
        }
    ],
    "recommendations": {
        "immediate": ["actions needed in 24-48 hours"],
        "short_term": ["actions needed in 1-2 weeks"],
        "long_term": ["actions needed in 1-3 months"]
    }
}"""
