"""Sample catalogue and challenge pools loaded at startup.

Every entry carries a fixed id so loading is idempotent by identifier.
Brain-teaser and marathon dates are offsets from the day of loading.
"""

from __future__ import annotations

COURSE_SEED_DATA: list[dict] = [
    {
        "id": "course-programming-fundamentals",
        "title": "Programming Fundamentals",
        "description": (
            "Learn the basics of programming with hands-on exercises covering variables, loops, "
            "functions, and problem-solving techniques."
        ),
        "level": "beginner",
        "duration": "6 weeks",
        "difficulty": "easy",
        "topics": ["Variables", "Control Flow", "Functions", "Basic Data Structures"],
        "prerequisites": "No prior programming experience required",
        "instructor": "Dr. Sarah Chen",
        "rating": 5,
        "price": "Free",
    },
    {
        "id": "course-data-structures-essentials",
        "title": "Data Structures Essentials",
        "description": (
            "Master fundamental data structures including arrays, linked lists, stacks, queues, trees, "
            "and hash tables with practical implementation."
        ),
        "level": "beginner",
        "duration": "8 weeks",
        "difficulty": "medium",
        "topics": ["Arrays", "Linked Lists", "Stacks & Queues", "Trees", "Hash Tables"],
        "prerequisites": "Basic programming knowledge in any language",
        "instructor": "Prof. Michael Rodriguez",
        "rating": 5,
        "price": "Free",
    },
    {
        "id": "course-algorithms-design-analysis",
        "title": "Algorithms Design & Analysis",
        "description": (
            "Comprehensive course covering sorting, searching, graph algorithms, dynamic programming, "
            "and algorithm complexity analysis."
        ),
        "level": "intermediate",
        "duration": "10 weeks",
        "difficulty": "medium",
        "topics": [
            "Sorting Algorithms",
            "Graph Algorithms",
            "Dynamic Programming",
            "Greedy Algorithms",
            "Complexity Analysis",
        ],
        "prerequisites": "Knowledge of basic data structures",
        "instructor": "Dr. Elena Vasquez",
        "rating": 5,
        "price": "$49",
    },
    {
        "id": "course-advanced-problem-solving",
        "title": "Advanced Problem Solving",
        "description": (
            "Tackle complex competitive programming problems with advanced techniques, optimization "
            "strategies, and mathematical concepts."
        ),
        "level": "intermediate",
        "duration": "12 weeks",
        "difficulty": "hard",
        "topics": ["Advanced Graph Theory", "Number Theory", "String Algorithms", "Computational Geometry"],
        "prerequisites": "Strong foundation in algorithms and data structures",
        "instructor": "Alex Thompson",
        "rating": 5,
        "price": "$99",
    },
    {
        "id": "course-competitive-programming-mastery",
        "title": "Competitive Programming Mastery",
        "description": (
            "Elite-level training for international programming contests with advanced optimization, "
            "mathematical concepts, and contest strategies."
        ),
        "level": "advanced",
        "duration": "16 weeks",
        "difficulty": "hard",
        "topics": [
            "Advanced Mathematics",
            "Complex Optimization",
            "Contest Strategy",
            "Advanced Data Structures",
        ],
        "prerequisites": "Extensive competitive programming experience",
        "instructor": "International Grandmaster Chen Liu",
        "rating": 5,
        "price": "$199",
    },
    {
        "id": "course-system-design-interviews",
        "title": "System Design for Coding Interviews",
        "description": (
            "Learn to design scalable systems with real-world case studies, distributed systems "
            "concepts, and interview preparation."
        ),
        "level": "advanced",
        "duration": "8 weeks",
        "difficulty": "hard",
        "topics": ["Scalability", "Database Design", "Microservices", "Caching", "Load Balancing"],
        "prerequisites": "Experience with software development and algorithms",
        "instructor": "Senior Engineer Maria Santos",
        "rating": 5,
        "price": "$149",
    },
]

# (title, description, content, duration in minutes); order is list position + 1.
_FUNDAMENTALS_LESSONS = [
    (
        "Introduction to Programming",
        "Understanding what programming is and basic concepts",
        "Learn the fundamental concepts of programming including algorithms, data, and control structures.",
        45,
    ),
    (
        "Variables and Data Types",
        "Working with different types of data in programming",
        "Explore different data types including numbers, strings, booleans, and how to store them in variables.",
        30,
    ),
    (
        "Control Flow - Conditionals",
        "Making decisions in your code with if statements",
        "Learn how to use if, else if, and else statements to control program flow.",
        40,
    ),
    (
        "Control Flow - Loops",
        "Repeating code execution with loops",
        "Master for loops, while loops, and understanding when to use each type.",
        35,
    ),
    (
        "Functions and Methods",
        "Creating reusable code blocks",
        "Learn how to write functions, pass parameters, and return values.",
        50,
    ),
]

_DATA_STRUCTURES_LESSONS = [
    (
        "Introduction to Data Structures",
        "Understanding why data structures matter",
        "Learn the importance of data organization and efficiency in programming.",
        30,
    ),
    (
        "Arrays and Lists",
        "Working with ordered collections of data",
        "Master arrays, dynamic arrays, and list operations.",
        45,
    ),
    (
        "Linked Lists",
        "Understanding pointer-based data structures",
        "Learn singly and doubly linked lists and their applications.",
        55,
    ),
    (
        "Stacks and Queues",
        "LIFO and FIFO data structures",
        "Implement and use stacks and queues for various problems.",
        40,
    ),
]

_GENERIC_LESSONS = [
    (
        "Course Introduction",
        "Welcome and course overview",
        "Introduction to the course objectives and learning outcomes.",
        20,
    ),
    (
        "Core Concepts",
        "Fundamental concepts and principles",
        "Deep dive into the core concepts that form the foundation of this topic.",
        40,
    ),
    (
        "Practical Applications",
        "Real-world examples and use cases",
        "Explore practical applications and hands-on examples.",
        60,
    ),
    (
        "Advanced Techniques",
        "Advanced methods and best practices",
        "Learn advanced techniques and industry best practices.",
        45,
    ),
    (
        "Final Project",
        "Apply your knowledge in a comprehensive project",
        "Complete a final project that demonstrates your mastery of the subject.",
        90,
    ),
]

_LESSON_SETS = {
    "course-programming-fundamentals": _FUNDAMENTALS_LESSONS,
    "course-data-structures-essentials": _DATA_STRUCTURES_LESSONS,
}


def lesson_seed_data(course_id: str) -> list[dict]:
    """Lessons for a seeded course, with ids derived from the course id."""
    lessons = _LESSON_SETS.get(course_id, _GENERIC_LESSONS)
    return [
        {
            "id": f"{course_id}-lesson-{order}",
            "course_id": course_id,
            "title": title,
            "description": description,
            "content": content,
            "order": order,
            "duration": duration,
            "type": "theory",
        }
        for order, (title, description, content, duration) in enumerate(lessons, start=1)
    ]


TYPING_CHALLENGE_SEED_DATA: list[dict] = [
    # JavaScript
    {
        "id": "typing-js-1",
        "title": "Array Map Function",
        "code": "const numbers = [1, 2, 3, 4, 5];\nconst doubled = numbers.map(n => n * 2);\nconsole.log(doubled);",
        "language": "javascript",
        "difficulty": "easy",
        "line_count": 3,
    },
    {
        "id": "typing-js-2",
        "title": "Async/Await Example",
        "code": (
            "async function fetchData(url) {\n"
            "  const response = await fetch(url);\n"
            "  const data = await response.json();\n"
            "  return data;\n"
            "}\n"
            "\n"
            "fetchData('/api/users')\n"
            "  .then(console.log)\n"
            "  .catch(console.error);"
        ),
        "language": "javascript",
        "difficulty": "medium",
        "line_count": 8,
    },
    {
        "id": "typing-js-3",
        "title": "Class with Methods",
        "code": (
            "class LinkedListNode {\n"
            "  constructor(value) {\n"
            "    this.value = value;\n"
            "    this.next = null;\n"
            "  }\n"
            "\n"
            "  append(value) {\n"
            "    const newNode = new LinkedListNode(value);\n"
            "    let current = this;\n"
            "    while (current.next !== null) {\n"
            "      current = current.next;\n"
            "    }\n"
            "    current.next = newNode;\n"
            "    return this;\n"
            "  }\n"
            "\n"
            "  find(value) {\n"
            "    let current = this;\n"
            "    while (current !== null) {\n"
            "      if (current.value === value) return current;\n"
            "      current = current.next;\n"
            "    }\n"
            "    return null;\n"
            "  }\n"
            "}"
        ),
        "language": "javascript",
        "difficulty": "hard",
        "line_count": 24,
    },
    # Python
    {
        "id": "typing-py-1",
        "title": "List Comprehension",
        "code": "numbers = [1, 2, 3, 4, 5]\nsquares = [n**2 for n in numbers]\nprint(squares)",
        "language": "python",
        "difficulty": "easy",
        "line_count": 3,
    },
    {
        "id": "typing-py-2",
        "title": "Dictionary Operations",
        "code": (
            "def count_frequencies(items):\n"
            "    freq = {}\n"
            "    for item in items:\n"
            "        if item in freq:\n"
            "            freq[item] += 1\n"
            "        else:\n"
            "            freq[item] = 1\n"
            "    return freq\n"
            "\n"
            "result = count_frequencies(['a', 'b', 'a', 'c', 'b', 'a'])\n"
            "print(result)"
        ),
        "language": "python",
        "difficulty": "medium",
        "line_count": 11,
    },
    {
        "id": "typing-py-3",
        "title": "Binary Search Tree",
        "code": (
            "class TreeNode:\n"
            "    def __init__(self, value):\n"
            "        self.value = value\n"
            "        self.left = None\n"
            "        self.right = None\n"
            "\n"
            "class BST:\n"
            "    def __init__(self):\n"
            "        self.root = None\n"
            "    \n"
            "    def insert(self, value):\n"
            "        if not self.root:\n"
            "            self.root = TreeNode(value)\n"
            "        else:\n"
            "            self._insert_recursive(self.root, value)\n"
            "    \n"
            "    def _insert_recursive(self, node, value):\n"
            "        if value < node.value:\n"
            "            if node.left is None:\n"
            "                node.left = TreeNode(value)\n"
            "            else:\n"
            "                self._insert_recursive(node.left, value)\n"
            "        else:\n"
            "            if node.right is None:\n"
            "                node.right = TreeNode(value)\n"
            "            else:\n"
            "                self._insert_recursive(node.right, value)"
        ),
        "language": "python",
        "difficulty": "hard",
        "line_count": 27,
    },
]

QUIZ_QUESTION_SEED_DATA: list[dict] = [
    # Arrays
    {
        "id": "quiz-arr-1",
        "question": "What is the time complexity of accessing an element in an array by index?",
        "options": ["O(1)", "O(log n)", "O(n)", "O(n log n)"],
        "correct_answer": 0,
        "topic": "arrays",
        "difficulty": "easy",
        "explanation": (
            "Arrays provide constant-time access to elements by index because they are stored in "
            "contiguous memory locations."
        ),
        "time_limit": 30,
    },
    {
        "id": "quiz-arr-2",
        "question": "What will be the output of this code?",
        "code_snippet": "const arr = [1, 2, 3];\narr.push(4);\narr.pop();\nconsole.log(arr.length);",
        "options": ["2", "3", "4", "undefined"],
        "correct_answer": 1,
        "topic": "arrays",
        "difficulty": "medium",
        "explanation": "After push(4), array is [1,2,3,4]. pop() removes 4, leaving [1,2,3] with length 3.",
        "time_limit": 45,
    },
    # Graphs
    {
        "id": "quiz-graph-1",
        "question": "Which graph traversal uses a queue data structure?",
        "options": [
            "Depth-First Search (DFS)",
            "Breadth-First Search (BFS)",
            "Dijkstra's Algorithm",
            "Prim's Algorithm",
        ],
        "correct_answer": 1,
        "topic": "graphs",
        "difficulty": "medium",
        "explanation": "BFS uses a queue to explore nodes level by level, while DFS uses a stack (or recursion).",
        "time_limit": 40,
    },
    {
        "id": "quiz-graph-2",
        "question": "What is the maximum number of edges in a simple undirected graph with n vertices?",
        "options": ["n", "n(n-1)", "n(n-1)/2", "2^n"],
        "correct_answer": 2,
        "topic": "graphs",
        "difficulty": "hard",
        "explanation": (
            "In a complete simple undirected graph, each vertex connects to n-1 others, but each edge "
            "is counted twice, so it's n(n-1)/2."
        ),
        "time_limit": 60,
    },
    # Dynamic programming
    {
        "id": "quiz-dp-1",
        "question": "What is the main idea behind dynamic programming?",
        "options": [
            "Divide and conquer",
            "Storing results of subproblems to avoid recomputation",
            "Using greedy choices",
            "Randomization",
        ],
        "correct_answer": 1,
        "topic": "dp",
        "difficulty": "easy",
        "explanation": (
            "Dynamic programming stores solutions to subproblems (memoization or tabulation) to avoid "
            "redundant calculations."
        ),
        "time_limit": 35,
    },
    {
        "id": "quiz-dp-2",
        "question": "Which approach is typically faster for the Fibonacci sequence with memoization?",
        "options": ["Top-down", "Bottom-up", "Both are equal", "Neither uses memoization"],
        "correct_answer": 2,
        "topic": "dp",
        "difficulty": "medium",
        "explanation": (
            "Both top-down (memoization) and bottom-up (tabulation) have similar time complexity when "
            "optimized."
        ),
        "time_limit": 50,
    },
    # Trees
    {
        "id": "quiz-tree-1",
        "question": "In a binary search tree, where is the minimum value located?",
        "options": ["Root", "Leftmost node", "Rightmost node", "Any leaf node"],
        "correct_answer": 1,
        "topic": "trees",
        "difficulty": "easy",
        "explanation": "In a BST, smaller values are to the left, so the minimum is at the leftmost node.",
        "time_limit": 30,
    },
    {
        "id": "quiz-tree-2",
        "question": "What is the height of a balanced binary tree with n nodes?",
        "options": ["O(n)", "O(log n)", "O(n log n)", "O(1)"],
        "correct_answer": 1,
        "topic": "trees",
        "difficulty": "medium",
        "explanation": "A balanced binary tree has O(log n) height, which is why operations are efficient.",
        "time_limit": 40,
    },
    # Strings
    {
        "id": "quiz-str-1",
        "question": (
            "What is the time complexity of concatenating n strings of length m using the + operator "
            "in most languages?"
        ),
        "options": ["O(n)", "O(m)", "O(nm)", "O(n²m)"],
        "correct_answer": 3,
        "topic": "strings",
        "difficulty": "medium",
        "explanation": (
            "Each concatenation creates a new string and copies all previous characters, leading to "
            "O(n²m) complexity."
        ),
        "time_limit": 50,
    },
    {
        "id": "quiz-str-2",
        "question": "Which algorithm is commonly used for pattern matching in strings?",
        "options": ["Binary Search", "KMP Algorithm", "Merge Sort", "Dijkstra's Algorithm"],
        "correct_answer": 1,
        "topic": "strings",
        "difficulty": "medium",
        "explanation": "The Knuth-Morris-Pratt (KMP) algorithm efficiently finds pattern occurrences in strings.",
        "time_limit": 45,
    },
]

BRAIN_TEASER_SEED_DATA: list[dict] = [
    {
        "id": "teaser-1",
        "day_offset": 0,
        "title": "The Two Egg Problem",
        "puzzle": (
            "You have two identical eggs and access to a 100-floor building. You want to find the "
            "highest floor from which an egg can be dropped without breaking. What is the minimum "
            "number of drops required in the worst case to guarantee you find this floor?"
        ),
        "hint1": "Think about how to minimize the worst-case number of drops, not the average case.",
        "hint2": (
            "Consider starting from a floor that isn't too high or too low, and adjust your strategy "
            "based on whether the first egg breaks."
        ),
        "hint3": "The optimal strategy involves dropping from floor 14 first, then adjusting by decreasing intervals.",
        "solution": "14",
        "difficulty": "hard",
        "explanation": (
            "Start at floor 14. If it breaks, test floors 1-13 linearly (13 more drops max). If it "
            "doesn't break, go to floor 27 (14+13), then 39 (27+12), etc. This minimizes worst-case "
            "drops to 14."
        ),
        "category": "logic",
    },
    {
        "id": "teaser-2",
        "day_offset": 1,
        "title": "Missing Number",
        "puzzle": (
            "An array contains numbers from 1 to 100, but one number is missing. What's the fastest "
            "way to find the missing number?"
        ),
        "hint1": "Think about mathematical properties of sequences.",
        "hint2": "The sum of numbers from 1 to n has a formula: n(n+1)/2",
        "hint3": "Calculate the expected sum and subtract the actual sum.",
        "solution": "sum formula",
        "difficulty": "easy",
        "explanation": (
            "Calculate the expected sum using n(n+1)/2 for n=100, which is 5050. Subtract the sum of "
            "array elements. The difference is the missing number. Time: O(n), Space: O(1)."
        ),
        "category": "math",
    },
    {
        "id": "teaser-3",
        "day_offset": 2,
        "title": "Clock Angle",
        "puzzle": (
            "At what time between 3 and 4 o'clock are the hour and minute hands of a clock exactly "
            "opposite to each other (180 degrees apart)?"
        ),
        "hint1": "The minute hand moves 360° in 60 minutes (6° per minute).",
        "hint2": "The hour hand moves 30° per hour (0.5° per minute).",
        "hint3": "Set up an equation where the angle difference equals 180°.",
        "solution": "3:49:05",
        "difficulty": "medium",
        "explanation": (
            "At time 3:x, the hour hand is at 90 + 0.5x degrees, minute hand at 6x degrees. For 180° "
            "difference: |6x - (90 + 0.5x)| = 180. Solving gives x ≈ 49.09 minutes = 3:49:05."
        ),
        "category": "math",
    },
]

MARATHON_SEED_DATA: list[dict] = [
    {
        "id": "marathon-1",
        "title": "Weekly Coding Sprint #42",
        "description": (
            "Test your skills across multiple problem domains in this weekend marathon. Solve 8 "
            "challenging problems ranging from arrays to dynamic programming!"
        ),
        "start_offset_days": 2,
        "duration_days": 1,
        "problem_ids": [f"prob-{n}" for n in range(1, 9)],
        "status": "upcoming",
        "difficulty": "mixed",
    },
    {
        "id": "marathon-2",
        "title": "Beginner's Challenge Marathon",
        "description": (
            "Perfect for those just starting their competitive programming journey. 5 carefully "
            "selected easy to medium problems."
        ),
        "start_offset_days": 7,
        "duration_days": 1,
        "problem_ids": [f"prob-{n}" for n in range(9, 14)],
        "status": "upcoming",
        "difficulty": "easy",
    },
]
